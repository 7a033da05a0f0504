"""
pochisr setup.py

pochisrパッケージのインストール設定
"""

from setuptools import find_packages, setup

setup(
    name='pochisr',
    version='0.1.0',
    author='Pochi Team',
    author_email='pochi@example.com',
    description='A tiny super-resolution demo, as friendly as Pochi!',
    url='https://github.com/pochi-team/pochisr',
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
        'Topic :: Scientific/Engineering :: Image Processing',
    ],
    keywords='super resolution, computer vision, onnxruntime, openvino, inference',
    python_requires='>=3.10',
    install_requires=[
        'numpy>=1.24.0',
        'opencv-python>=4.8.0',
        'onnx>=1.14.0',
        'onnxruntime>=1.16.0',
        'openvino>=2024.0.0',
        'pydantic>=2.0.0',
        'colorlog>=6.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=6.0.0',
            'Pillow>=9.0.0',
        ],
        'dev': [
            'pytest>=6.0.0',
            'Pillow>=9.0.0',
            'flake8>=3.8.0',
            'black>=21.0.0',
            'isort>=5.8.0',
            'pydocstyle>=6.0.0',
            'pre-commit>=2.12.0'
        ]
    },
    entry_points={
        'console_scripts': [
            'pochi-sr=pochisr.cli.super_resolution:main',
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
