import struct

import pytest

from qoicodec import (
    DimensionOverflow,
    InvalidDescriptor,
    InvalidPixelData,
    QOIDecoder,
    QOIDesc,
    QOIEncoder,
    QOIError,
)

PADDING = b"\x00\x00\x00\x00\x00\x00\x00\x01"


def header(width, height, channels, colorspace=0):
    return b"qoif" + struct.pack(">IIBB", width, height, channels, colorspace)


def body(encoded, width, height, channels, colorspace=0):
    """Strip header and end marker, checking both."""
    assert encoded[:14] == header(width, height, channels, colorspace)
    assert encoded[-8:] == PADDING
    return encoded[14:-8]


def test_two_pixel_example():
    desc = QOIDesc(2, 1, 3, 0)
    encoded = QOIEncoder.encode(bytes([10, 20, 30, 10, 20, 30]), desc)

    # First pixel differs from the initial (0, 0, 0, 255): RGB chunk, then a run of 1
    assert encoded == header(2, 1, 3) + b"\xfe\x0a\x14\x1e" + b"\xc0" + PADDING
    assert len(encoded) == 27


def test_accepts_dict_description():
    pixels = [255, 0, 0, 0, 255, 0, 0, 0, 255, 255, 255, 255]
    from_dict = QOIEncoder.encode(
        pixels, {"width": 2, "height": 2, "channels": 3, "colorspace": 0}
    )
    assert from_dict == QOIEncoder.encode(bytes(pixels), QOIDesc(2, 2, 3))


def test_accepts_memoryview():
    pixels = bytearray([1, 2, 3, 4] * 6)
    desc = QOIDesc(3, 2, 4)
    assert QOIEncoder.encode(memoryview(pixels), desc) == QOIEncoder.encode(
        bytes(pixels), desc
    )


def test_run_of_62_then_new_pixel():
    # Black matches the initial previous pixel, so the run starts immediately
    pixels = bytes(62 * 3) + bytes([1, 1, 1])
    encoded = QOIEncoder.encode(pixels, QOIDesc(63, 1, 3))

    assert body(encoded, 63, 1, 3) == bytes([0b11111101, 0x7F])


def test_run_of_63_splits_into_two_chunks():
    pixels = bytes(63 * 3) + bytes([1, 1, 1])
    encoded = QOIEncoder.encode(pixels, QOIDesc(64, 1, 3))

    assert body(encoded, 64, 1, 3) == bytes([0xFD, 0xC0, 0x7F])


def test_run_flushed_at_last_pixel():
    encoded = QOIEncoder.encode(bytes(63 * 3), QOIDesc(63, 1, 3))
    assert body(encoded, 63, 1, 3) == bytes([0xFD, 0xC0])


def test_index_hit():
    # (1, 0, 0) and (0, 0, 0) land in different cache slots
    pixels = bytes([1, 0, 0, 0, 0, 0, 1, 0, 0])
    encoded = QOIEncoder.encode(pixels, QOIDesc(3, 1, 3))

    # DIFF, DIFF, INDEX 56
    assert body(encoded, 3, 1, 3) == bytes([0x7A, 0x5A, 0x38])


def test_colliding_pixel_overwrites_cache_slot():
    # (1, 0, 0) and (65, 0, 0) both hash to slot 56
    pixels = bytes([1, 0, 0, 65, 0, 0, 1, 0, 0])
    encoded = QOIEncoder.encode(pixels, QOIDesc(3, 1, 3))

    # The third pixel was evicted by the second and cannot be an INDEX chunk
    assert body(encoded, 3, 1, 3) == bytes(
        [0x7A, 0xFE, 65, 0, 0, 0xFE, 1, 0, 0]
    )


def test_diff_wraps_around():
    encoded = QOIEncoder.encode(bytes([255, 255, 255]), QOIDesc(1, 1, 3))
    assert body(encoded, 1, 1, 3) == bytes([0x55])


def test_luma_chunk():
    encoded = QOIEncoder.encode(bytes([10, 12, 14]), QOIDesc(1, 1, 3))
    assert body(encoded, 1, 1, 3) == bytes([0xAC, 0x6A])


def test_luma_out_of_range_falls_back_to_rgb():
    # vg = 20 fits, but r - g = -10 does not
    encoded = QOIEncoder.encode(bytes([10, 20, 30]), QOIDesc(1, 1, 3))
    assert body(encoded, 1, 1, 3) == bytes([0xFE, 10, 20, 30])


def test_alpha_change_forces_rgba():
    encoded = QOIEncoder.encode(bytes([1, 2, 3, 4]), QOIDesc(1, 1, 4, 1))
    assert body(encoded, 1, 1, 4, 1) == bytes([0xFF, 1, 2, 3, 4])


def test_alpha_change_skips_diff():
    # RGB delta of zero would be a DIFF chunk if alpha matched
    encoded = QOIEncoder.encode(bytes([0, 0, 0, 254]), QOIDesc(1, 1, 4))
    assert body(encoded, 1, 1, 4) == bytes([0xFF, 0, 0, 0, 254])


@pytest.mark.parametrize(
    "desc",
    [
        QOIDesc(0, 1, 3),
        QOIDesc(1, 0, 3),
        QOIDesc(1, 1, 5),
        QOIDesc(1, 1, 2),
        QOIDesc(1, 1, 3, 2),
    ],
)
def test_invalid_descriptor(desc):
    with pytest.raises(InvalidDescriptor):
        QOIEncoder.encode(bytes(16), desc)


def test_dimension_overflow():
    with pytest.raises(DimensionOverflow):
        QOIEncoder.encode(b"", QOIDesc(20000, 20000, 3))


def test_missing_pixel_data():
    with pytest.raises(InvalidPixelData):
        QOIEncoder.encode(None, QOIDesc(1, 1, 3))


def test_wrong_pixel_length():
    with pytest.raises(InvalidPixelData):
        QOIEncoder.encode(bytes(5), QOIDesc(1, 2, 3))


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        QOIEncoder.encode(bytes(3), {"width": 0, "height": 1, "channels": 3})
    assert issubclass(InvalidPixelData, QOIError)


@pytest.mark.parametrize(
    "pixels",
    [[256, 0, 0], [-1, 0, 0], [0, 0, "x"], 3],
)
def test_pixel_values_outside_byte_range(pixels):
    with pytest.raises(InvalidPixelData):
        QOIEncoder.encode(pixels, QOIDesc(1, 1, 3))


def test_list_of_ints_round_trips():
    pixels = [0, 255, 128, 1, 2, 3]
    decoded, _ = QOIDecoder.decode(QOIEncoder.encode(pixels, QOIDesc(2, 1, 3)))
    assert decoded == bytes(pixels)


@pytest.mark.parametrize("description", [None, 3, (1, 1, 3, 0)])
def test_description_must_be_desc_or_mapping(description):
    with pytest.raises(InvalidDescriptor):
        QOIEncoder.encode(bytes(3), description)
