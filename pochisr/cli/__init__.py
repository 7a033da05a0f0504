"""pochisr.cli: コマンドラインエントリポイント."""
