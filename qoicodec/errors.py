class QOIError(ValueError):
    """Base class for every error raised by the codec."""


class InvalidDescriptor(QOIError):
    """Width, height, channels or colorspace out of range."""


class DimensionOverflow(InvalidDescriptor):
    """width * height exceeds QOI_PIXELS_MAX."""


class InvalidPixelData(QOIError):
    pass


class InvalidChannels(QOIError):
    """Requested output channel count is not 0, 3 or 4."""


class BadMagic(QOIError):
    pass


class TruncatedInput(QOIError):
    pass
