from .tlv import TLV
