"""
Scan a document photo from the command line.

Detects the document quadrilateral (or takes explicit corners), rectifies
it and writes the flattened image. Optionally sends the result to the
field-extraction service and prints the structured record as JSON.

Usage:
    # Auto-detect and rectify
    python scripts/scan_document.py photo.jpg

    # Explicit corners in percent of the frame (any order)
    python scripts/scan_document.py photo.jpg --corners 12,8,88,10,90,92,10,90

    # Rectify and extract fields in Korean (needs GEMINI_API_KEY)
    python scripts/scan_document.py photo.jpg --extract --locale ko
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import cv2

# Add source root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from docscan.common.exceptions import DocScanError  # noqa: E402
from docscan.common.types import Quadrilateral  # noqa: E402
from docscan.config_loader import get_default_config, load_config  # noqa: E402
from docscan.detection.normalizer import normalize_corners  # noqa: E402
from docscan.extraction.client import GeminiFieldExtractor  # noqa: E402
from docscan.session import CaptureSession  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_corners(text: str) -> Quadrilateral:
    """Parse "x1,y1,x2,y2,x3,y3,x4,y4" (percent) into an ordered quad."""
    try:
        values = [float(v) for v in text.split(",")]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Corners must be numbers: {e}") from e
    if len(values) != 8:
        raise argparse.ArgumentTypeError(
            f"Expected 8 comma-separated values (4 corners), got {len(values)}"
        )
    points = [(values[i], values[i + 1]) for i in range(0, 8, 2)]
    return normalize_corners(points)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detect, rectify and optionally extract fields from a document photo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/scan_document.py receipt.jpg
  python scripts/scan_document.py receipt.jpg --output flat.jpg
  python scripts/scan_document.py passport.jpg --extract --locale jp
        """,
    )
    parser.add_argument("image", type=Path, help="Input image path")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Rectified image path (default: <image>_scan.jpg next to the input)",
    )
    parser.add_argument(
        "--corners",
        type=parse_corners,
        default=None,
        help="Explicit corners in percent of the frame: x1,y1,x2,y2,x3,y3,x4,y4",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML config (default: bundled config.yaml)"
    )
    parser.add_argument(
        "--extract",
        action="store_true",
        help="Send the rectified image to the field-extraction service",
    )
    parser.add_argument(
        "--locale",
        type=str,
        default="en",
        help="Language hint for extracted summary and tags (en, ko, jp)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the scanner CLI."""
    args = build_parser().parse_args(argv)

    image = cv2.imread(str(args.image), cv2.IMREAD_COLOR)
    if image is None:
        logger.error(f"Could not read image: {args.image}")
        return 1

    config = load_config(args.config) if args.config else get_default_config()
    extractor = GeminiFieldExtractor(config.extraction) if args.extract else None
    session = CaptureSession(config=config, extractor=extractor, locale=args.locale)

    quad = session.load_image(image, seed=args.corners)
    logger.info(f"Working quad: {[p.to_tuple() for p in quad.points]}")

    try:
        record = session.confirm()
    except DocScanError as e:
        logger.error(f"Rectification failed: {e}")
        return 2

    output = args.output or args.image.with_name(f"{args.image.stem}_scan.jpg")
    if not cv2.imwrite(str(output), session.rectified.data):
        logger.error(f"Could not write output image: {output}")
        return 1
    logger.info(
        f"Wrote {output} ({session.rectified.width}x{session.rectified.height})"
    )

    summary = {
        "output": str(output),
        "corners": [list(p.to_tuple()) for p in quad.points],
        "width": session.rectified.width,
        "height": session.rectified.height,
    }
    if record is not None:
        summary["record"] = record.model_dump(mode="json", by_alias=True)
    if session.extraction_error:
        summary["extraction_error"] = session.extraction_error

    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
