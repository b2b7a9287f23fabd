# main.py
import argparse
import logging
import sys

from PyQt6.QtWidgets import QApplication

from Model.config import AppConfig
from View.gui import MRS3GUI


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="MRS3 client: select regions, compress to a package, restore images.")
    ap.add_argument("--api-base", default=None,
                    help="Base URL of the MRS3 backend (default: $MRS3_API_BASE_URL or http://localhost:8000)")
    ap.add_argument("--timeout", type=float, default=None,
                    help="Request timeout in seconds, 0 waits forever (default: $MRS3_REQUEST_TIMEOUT or 300)")
    ap.add_argument("--max-upload-mb", type=float, default=None, help="Maximum upload size in MB (default: 10)")
    ap.add_argument("--background", default=None, help="Background image of the start page")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    # Qt keeps its own options (-style, -platform, ...)
    return ap.parse_known_args(argv)


def main():
    args, qt_args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = AppConfig.from_env().with_overrides(
        api_base_url=args.api_base,
        request_timeout=args.timeout,
        max_upload_mb=args.max_upload_mb,
        background_image=args.background,
    )

    app = QApplication([sys.argv[0], *qt_args])
    win = MRS3GUI(config)
    win.showMaximized()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
