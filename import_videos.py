"""CLI shim -- delegates to yt_importer.cli.main().

Usage:
    python import_videos.py
    python import_videos.py --verbose --log-file logs/import.log
"""

from yt_importer.cli import main

if __name__ == "__main__":
    main()
