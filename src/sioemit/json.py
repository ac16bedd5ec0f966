''' Wrapper module around msgspec providing the equivalent of
    :func:`json.loads` and :func:`json.dumps`.
'''

import msgspec


def default(value):
    ''' Encoding hook for values msgspec does not handle natively. Objects
        exposing a to_dict() method are encoded as that mapping; anything
        else is rejected with a TypeError.
    '''

    try:
        to_dict = value.to_dict
    except AttributeError:
        raise TypeError('cannot serialize value of type ' + type(value).__name__)

    return to_dict()


# The msgspec 'encode' operation returns bytes. The legacy request channel
# carries JSON text, hence the additional dumps_text.

encoder = msgspec.json.Encoder(enc_hook=default)
decoder = msgspec.json.Decoder()
dumps = encoder.encode
loads = decoder.decode


def dumps_text(value):
    ''' Return the JSON encoding of *value* as a str instead of bytes.
    '''

    return dumps(value).decode()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
