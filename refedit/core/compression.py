"""
Compression handling for reference catalogs

Catalogs are published either plain or compressed. Supported formats,
detected from magic bytes:
- zstd (mirrored catalogs)
- gzip
- xz/lzma
- bzip2
"""

MAGIC_ZSTD = b'\x28\xb5\x2f\xfd'
MAGIC_GZIP = b'\x1f\x8b'
MAGIC_XZ = b'\xfd7zXZ\x00'
MAGIC_BZ2 = b'BZh'

# Reference files stay below a few MB uncompressed; zstd frames written
# without content size need an explicit bound.
ZSTD_MAX_RATIO = 50


def detect_format(data: bytes) -> str:
    """Detect compression format from magic bytes.

    Args:
        data: At least the first 6 bytes of the payload

    Returns:
        Format name: 'zstd', 'gzip', 'xz', 'bzip2', or 'plain'
    """
    if data[:4] == MAGIC_ZSTD:
        return 'zstd'
    elif data[:2] == MAGIC_GZIP:
        return 'gzip'
    elif data[:6] == MAGIC_XZ:
        return 'xz'
    elif data[:3] == MAGIC_BZ2:
        return 'bzip2'
    else:
        return 'plain'


def decompress_bytes(data: bytes) -> bytes:
    """Decompress a catalog payload, auto-detecting its format.

    Raises:
        ValueError: If the payload is corrupt for its detected format
    """
    fmt = detect_format(data)

    try:
        if fmt == 'zstd':
            import zstandard as zstd
            dctx = zstd.ZstdDecompressor()
            return dctx.decompress(data, max_output_size=len(data) * ZSTD_MAX_RATIO)

        elif fmt == 'gzip':
            import gzip
            return gzip.decompress(data)

        elif fmt == 'xz':
            import lzma
            return lzma.decompress(data)

        elif fmt == 'bzip2':
            import bz2
            return bz2.decompress(data)

    except ValueError:
        raise
    except Exception as e:
        # gzip.BadGzipFile, lzma.LZMAError, zstd.ZstdError, OSError
        raise ValueError(f"corrupt {fmt} data: {e}") from e

    return data


def compress_zstd(data: bytes, level: int = 10) -> bytes:
    """Compress a payload with zstd, the format used for mirrored catalogs."""
    import zstandard as zstd
    return zstd.ZstdCompressor(level=level).compress(data)
