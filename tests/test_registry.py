import pytest

from layerstruct.core import Header
from layerstruct.exceptions import ParseError, RegistryError, SchemaError
from layerstruct.fields import Int16, BodyField
from layerstruct.protocols import ARP, Eth, Dot1q
from layerstruct.registry import registry
from layerstruct.types import TLV


class Outer(Header):
    discriminator = Int16()
    body          = BodyField()


def test_dispatch(fresh_registry, arp_request):
    fresh_registry.bind(Outer, 'discriminator', 0x0806, ARP)

    outer = fresh_registry.dissect(Outer, b'\x08\x06' + arp_request)

    assert outer.body.is_nested
    arp = outer.body.value
    assert isinstance(arp, ARP)
    assert arp.sha.to_human() == 'aa:bb:cc:dd:ee:ff'
    assert arp.spa.to_human() == '10.0.0.1'
    assert arp.tpa.to_human() == '10.0.0.2'
    assert outer.pack() == b'\x08\x06' + arp_request

    outer = fresh_registry.dissect(Outer, b'\x08\x00' + arp_request)

    assert not outer.body.is_nested
    assert outer.body.value == arp_request


def test_resolve(fresh_registry):
    assert fresh_registry.resolve(Outer, 'discriminator', 0x0806) is None

    fresh_registry.bind(Outer, 'discriminator', 0x0806, ARP)

    assert fresh_registry.resolve(Outer, 'discriminator', 0x0806) is ARP
    assert fresh_registry.resolve(Outer, 'discriminator', 0x0800) is None
    assert fresh_registry.resolve(Outer, 'miao', 0x0806) is None


def test_last_binding_wins(fresh_registry):
    fresh_registry.bind(Outer, 'discriminator', 0x0806, Eth)
    fresh_registry.bind(Outer, 'discriminator', 0x0806, ARP)

    assert fresh_registry.resolve(Outer, 'discriminator', 0x0806) is ARP
    assert len(fresh_registry.get_bindings(Outer)) == 1


def test_bind_unknown_field(fresh_registry):
    with pytest.raises(SchemaError):
        fresh_registry.bind(Outer, 'kebab', 1, ARP)


def test_bind_header_w_alias(fresh_registry):
    fresh_registry.bind_header(Eth, ARP, type=0x0806)

    assert fresh_registry.resolve(Eth, 'ethertype', 0x0806) is ARP
    assert fresh_registry.bindings_for(Eth, ARP)[0].field == 'ethertype'


def test_freeze(fresh_registry):
    fresh_registry.bind(Outer, 'discriminator', 0x0806, ARP)
    fresh_registry.freeze()

    assert fresh_registry.frozen

    with pytest.raises(RegistryError):
        fresh_registry.bind(Outer, 'discriminator', 0x0800, ARP)

    with pytest.raises(RegistryError):
        fresh_registry.add_header(Outer)

    # reading is still possible
    assert fresh_registry.resolve(Outer, 'discriminator', 0x0806) is ARP


def test_headers(fresh_registry):
    fresh_registry.add_header(Outer)

    assert fresh_registry.get_header('Outer') is Outer
    assert fresh_registry.headers == ['Outer']

    with pytest.raises(KeyError):
        fresh_registry.get_header('IP')


def test_nested_parse_error(fresh_registry, arp_request):
    fresh_registry.bind(Outer, 'discriminator', 0x0806, ARP)

    with pytest.raises(ParseError) as excinfo:
        fresh_registry.dissect(Outer, b'\x08\x06' + arp_request[:10])

    assert excinfo.value.chain == ['body']


def test_trailing_bytes_keep_body_raw(fresh_registry):
    fresh_registry.bind(Outer, 'discriminator', 1, TLV)

    data = b'\x00\x01' + b'\x01\x01a' + b'XYZ'
    outer = fresh_registry.dissect(Outer, data)

    assert not outer.body.is_nested
    assert outer.body.value == b'\x01\x01aXYZ'
    assert outer.pack() == data

    # without trailing bytes the body is decoded
    outer = fresh_registry.dissect(Outer, b'\x00\x01\x01\x01a')

    assert outer.body.is_nested
    assert outer.body.value.value.value == b'a'


def test_stack(arp_request):
    eth = Eth(src='00:11:22:33:44:55', dst='ff:ff:ff:ff:ff:ff')

    registry.stack(eth, ARP(arp_request))

    assert eth.ethertype.value == 0x0806
    assert eth.size == 14 + 28
    assert eth.pack() == bytes.fromhex('ffffffffffff001122334455' '0806') + arp_request

    with pytest.raises(RegistryError):
        registry.stack(ARP(), Eth())


def test_default_registry(arp_request):
    assert registry.get_header('ARP') is ARP
    assert registry.resolve(Eth, 'ethertype', 0x0806) is ARP
    assert registry.resolve(Eth, 'type', 0x8100) is Dot1q

    data = (
        bytes.fromhex('ffffffffffff' 'aabbccddeeff' '8100') +
        bytes.fromhex('a064' '0806') +
        arp_request
    )

    eth = registry.dissect(Eth, data)

    assert isinstance(eth.body.value, Dot1q)
    dot1q = eth.body.value
    assert dot1q.tci['vid'] == 100
    assert dot1q.tci['pcp'] == 5
    assert isinstance(dot1q.body.value, ARP)
    assert dot1q.body.value.spa.to_human() == '10.0.0.1'

    assert eth.pack() == data
    assert 'body: <Dot1q>' in eth.to_human()


def test_dot1q_tag():
    dot1q = Dot1q(bytes.fromhex('a064' '0806'))

    assert dot1q.tci['pcp'] == 5
    assert dot1q.tci['dei'] == 0
    assert dot1q.tci['vid'] == 100
    assert dot1q.ethertype.value == 0x0806
    assert dot1q.pack() == bytes.fromhex('a064' '0806')
