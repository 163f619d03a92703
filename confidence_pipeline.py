#!/usr/bin/env python3
"""
Stereo confidence pipeline
Confidence maps and visualizations for batches of disparity maps
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Any, Optional

import numpy as np
from tqdm import tqdm

from stereo_confidence.core.config import ConfidenceConfig
from stereo_confidence.core.fusion import DisparityConfidence
from stereo_confidence.utils.disparity_utils import mask_disparity, confidence_statistics
from stereo_confidence.utils.io_utils import (
    load_disparity,
    load_grayscale,
    save_confidence,
    save_colorized,
    save_statistics,
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Stereo disparity confidence maps")

    # Input/Output
    parser.add_argument(
        "--disparity",
        type=str,
        nargs="+",
        required=True,
        help="Q4.4 disparity maps (.npy or 16-bit PNG/TIFF)",
    )
    parser.add_argument(
        "--gray",
        type=str,
        nargs="+",
        required=True,
        help="Rectified left grayscale images, one per disparity map",
    )
    parser.add_argument(
        "--output_dir", type=str, required=True, help="Output directory for results"
    )

    # Tuning
    parser.add_argument(
        "--config", type=str, default=None, help="JSON file with ConfidenceConfig fields"
    )
    parser.add_argument(
        "--texture_cap",
        type=float,
        default=None,
        help="Sobel magnitude treated as full texture (default: 200)",
    )
    parser.add_argument(
        "--variance_half_life",
        type=float,
        default=None,
        help="Disparity variance at which the noise score halves (default: 400)",
    )
    parser.add_argument(
        "--num_workers",
        type=int,
        default=None,
        help="Row bands fused in parallel",
    )
    parser.add_argument(
        "--min_confidence",
        type=int,
        default=None,
        help="Threshold for --save_masked",
    )

    # Outputs
    parser.add_argument(
        "--no_color", action="store_true", help="Skip the colorized visualization"
    )
    parser.add_argument(
        "--save_masked",
        action="store_true",
        help="Also save disparity with low-confidence pixels invalidated",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )

    return parser.parse_args(argv)


def setup_logging(output_dir: str, level: str = "INFO"):
    """Setup logging configuration"""
    log_file = Path(output_dir) / "confidence_pipeline.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(log_file), logging.StreamHandler(sys.stdout)],
    )


def build_config(args) -> ConfidenceConfig:
    """Merge the JSON config file with command-line overrides"""
    config_dict: Dict[str, Any] = {}
    if args.config:
        config_dict.update(ConfidenceConfig.from_json(args.config).to_dict())

    for key in ("texture_cap", "variance_half_life", "num_workers", "min_confidence"):
        value = getattr(args, key)
        if value is not None:
            config_dict[key] = value

    if args.verbose:
        config_dict["log_level"] = "DEBUG"

    return ConfidenceConfig.from_dict(config_dict)


def process_frame(
    estimator: DisparityConfidence,
    disparity_path: str,
    gray_path: str,
    output_path: Path,
    save_color: bool = True,
    save_masked: bool = False,
) -> Dict[str, Any]:
    """Compute and save confidence outputs for one disparity/image pair"""
    disparity = load_disparity(disparity_path)
    gray = load_grayscale(gray_path)

    confidence = estimator.compute(disparity, gray)

    stem = Path(disparity_path).stem
    save_confidence(confidence, output_path / f"{stem}_confidence.png")

    if save_color:
        save_colorized(estimator.colorize(confidence), output_path / f"{stem}_confidence_color.png")

    if save_masked:
        masked = mask_disparity(
            disparity,
            confidence,
            estimator.config.min_confidence,
            estimator.config.invalid_disparity,
        )
        np.save(output_path / f"{stem}_disparity_masked.npy", masked)

    stats = confidence_statistics(confidence)
    logger.info(
        f"{stem}: {stats['confident_fraction'] * 100:.1f}% confident pixels, "
        f"mean {stats['mean']:.1f}, median {stats['median']:.1f}"
    )
    return stats


def confidence_pipeline(argv: Optional[List[str]] = None) -> int:
    """Run the confidence pipeline over all input pairs"""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except (ValueError, TypeError, OSError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(args.output_dir, config.log_level)

    if len(args.disparity) != len(args.gray):
        logger.error(
            f"Got {len(args.disparity)} disparity maps but {len(args.gray)} grayscale images"
        )
        return 1

    # Outputs are named by stem, so equal stems would overwrite each other
    stems = [Path(p).stem for p in args.disparity]
    duplicates = sorted({s for s in stems if stems.count(s) > 1})
    if duplicates:
        logger.error(f"Disparity inputs share file stems: {', '.join(duplicates)}")
        return 1

    output_path = Path(args.output_dir)
    estimator = DisparityConfidence(config)
    logger.info(f"Confidence config: {config.to_dict()}")

    start_time = time.time()
    all_stats: Dict[str, Any] = {}

    pairs = list(zip(args.disparity, args.gray))
    for disparity_path, gray_path in tqdm(pairs, desc="Confidence maps"):
        try:
            all_stats[Path(disparity_path).stem] = process_frame(
                estimator,
                disparity_path,
                gray_path,
                output_path,
                save_color=not args.no_color,
                save_masked=args.save_masked,
            )
        except ValueError as e:
            logger.error(f"Failed on {disparity_path}: {e}")
            return 1

    save_statistics(output_path / "confidence_statistics.json", all_stats)

    total_time = time.time() - start_time
    logger.info(f"Processed {len(pairs)} frame(s) in {total_time:.2f}s")
    return 0


def main():
    """Main entry point for command line usage"""
    return confidence_pipeline()


if __name__ == "__main__":
    sys.exit(main())
