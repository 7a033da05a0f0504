"""collect_image_paths のテスト."""

import logging

from pochisr.utils import collect_image_paths


class TestCollectImagePaths:
    """入力パス展開のテスト."""

    def test_files_keep_given_order(self, create_image_file):
        """ファイル指定は指定順のまま返ることを確認."""
        b = create_image_file("b.png")
        a = create_image_file("a.png")

        assert collect_image_paths([str(b), str(a)]) == [b, a]

    def test_directory_expanded_sorted(self, tmp_path, create_image_file):
        """ディレクトリは直下のファイルが名前順に展開されることを確認."""
        second = create_image_file("2.png", subdir="images")
        first = create_image_file("1.png", subdir="images")
        create_image_file("deep.png", subdir="images/nested")

        paths = collect_image_paths([str(tmp_path / "images")])

        assert paths == [first, second]

    def test_missing_path_warned_and_skipped(self, tmp_path, create_image_file, caplog):
        """存在しないパスは警告して無視されることを確認."""
        image = create_image_file("lr.png")
        log = logging.getLogger("test_input_files")
        missing = tmp_path / "missing.png"

        with caplog.at_level(logging.INFO, logger="test_input_files"):
            paths = collect_image_paths([str(missing), str(image)], log=log)

        assert paths == [image]
        messages = [record.message for record in caplog.records]
        assert f"ファイル {missing} を開けません" in messages
        assert "追加されたファイル数: 1" in messages

    def test_empty(self):
        """入力が空なら空リストを返すことを確認."""
        assert collect_image_paths([]) == []
