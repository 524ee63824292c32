''' Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps`.
'''

# msgspec is preferred when it is installed; orjson is the baseline
# dependency. Both return bytes from their 'dumps' equivalent, and both
# accept bytes or str for 'loads'.

msgspec = None
orjson = None

try:
    import msgspec
except ImportError:
    pass

if msgspec is None:
    import orjson


if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    dumps = encoder.encode
    loads = decoder.decode

    # msgspec raises TypeError for unsupported types, and its own
    # EncodeError for values it recognizes but cannot represent.

    EncodeError = (msgspec.EncodeError, TypeError, OverflowError)
    DecodeError = (msgspec.DecodeError, UnicodeDecodeError)
else:
    dumps = orjson.dumps
    loads = orjson.loads

    # orjson.JSONEncodeError is a TypeError, orjson.JSONDecodeError is a
    # ValueError.

    EncodeError = (orjson.JSONEncodeError, TypeError, OverflowError)
    DecodeError = (orjson.JSONDecodeError, UnicodeDecodeError)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
