#! The codec is pure Python while Pillow's PNG writer is C, so the timings compare
#! algorithms in very different runtimes. Treat the PNG column as a size reference.

import argparse
import io
import logging
import sys
import time

from PIL import Image

from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .qoi import QOIDesc
from .utils import load_image, load_pixel_dump, to_array

logger = logging.getLogger(__name__)

DUMP_EXTENSIONS = ("bin",)


def time_call(fn, *args, repeat: int = 3):
    """Run fn(*args) `repeat` times, return the last result and the best time."""
    if repeat < 1:
        raise ValueError("repeat must be >= 1")

    best = None
    result = None
    for _ in range(repeat):
        start_time = time.perf_counter()
        result = fn(*args)
        elapsed = time.perf_counter() - start_time
        if best is None or elapsed < best:
            best = elapsed
    return result, best


def _png_encode(pixels: bytes, desc: QOIDesc) -> bytes:
    image = Image.fromarray(to_array(pixels, desc))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def run_benchmark(pixels: bytes, desc: QOIDesc, repeat: int = 3) -> dict:
    encoded, encode_seconds = time_call(QOIEncoder.encode, pixels, desc, repeat=repeat)
    (decoded, decoded_desc), decode_seconds = time_call(
        QOIDecoder.decode, encoded, repeat=repeat
    )
    png, png_seconds = time_call(_png_encode, pixels, desc, repeat=repeat)

    logger.debug("QOI encode %.4fs, decode %.4fs", encode_seconds, decode_seconds)

    return {
        **desc.as_dict(),
        "raw_size": len(pixels),
        "qoi_size": len(encoded),
        "png_size": len(png),
        "encode_seconds": encode_seconds,
        "decode_seconds": decode_seconds,
        "png_seconds": png_seconds,
        "lossless": decoded == bytes(pixels) and decoded_desc == desc,
    }


def load_input(filepath: str) -> tuple[bytes, QOIDesc]:
    if filepath.lower().split(".")[-1] in DUMP_EXTENSIONS:
        return load_pixel_dump(filepath)

    pixel_data, desc = load_image(filepath)
    return pixel_data.tobytes(), desc


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Benchmark the QOI codec against PNG")
    parser.add_argument("image", help="image file, or a .bin raw pixel dump")
    parser.add_argument("--repeat", type=int, default=3)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    pixels, desc = load_input(args.image)
    print(
        f"Loaded image {args.image}: {desc.width}x{desc.height} Channels: {desc.channels}"
    )
    print(f"Original {args.image} {len(pixels)} bytes")

    report = run_benchmark(pixels, desc, repeat=args.repeat)

    print(f"Encoded QOI to {report['qoi_size']} bytes in {report['encode_seconds']:.2f} seconds")
    print(f"Decoded QOI in {report['decode_seconds']:.2f} seconds")
    print(f"Encoded PNG to {report['png_size']} bytes in {report['png_seconds']:.2f} seconds")

    if not report["lossless"]:
        print("Round trip does not match the original pixels!", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
