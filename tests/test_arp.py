import pytest

from layerstruct.exceptions import ParseError
from layerstruct.protocols import ARP, ArpOpcode


def test_defaults():
    arp = ARP()

    assert arp.hrd.value == 1
    assert arp.pro.value == 0x0800
    assert arp.hln.value == 6
    assert arp.pln.value == 4
    assert arp.op.value is ArpOpcode.REQUEST
    assert arp.body.value == b''
    assert arp.size == 28
    assert ARP.min_size() == 28


def test_literal_request(arp_request):
    arp = ARP(
        sha='aa:bb:cc:dd:ee:ff',
        spa='10.0.0.1',
        tha='00:00:00:00:00:00',
        tpa='10.0.0.2',
    )

    assert arp.pack() == arp_request
    assert arp.pack() == bytes.fromhex(
        '00 01 08 00 06 04 00 01 aa bb cc dd ee ff 0a 00 00 01 00 00 00 00 00 00 0a 00 00 02')


@pytest.mark.parametrize('options', [
    {'sha': 'aa:bb:cc:dd:ee:ff', 'spa': '10.0.0.1', 'tpa': '10.0.0.2'},
    {'src_mac': 'aa:bb:cc:dd:ee:ff', 'src_ip': '10.0.0.1', 'dst_ip': '10.0.0.2'},
    {'sender_hw_addr': 'aa:bb:cc:dd:ee:ff', 'sender_proto_addr': '10.0.0.1', 'target_proto_addr': '10.0.0.2'},
    {'sha': b'\xaa\xbb\xcc\xdd\xee\xff', 'spa': b'\x0a\x00\x00\x01', 'tpa': b'\x0a\x00\x00\x02',
     'dst_mac': '00:00:00:00:00:00', 'opcode': ArpOpcode.REQUEST, 'htype': 1, 'ptype': 0x0800,
     'hlen': 6, 'plen': 4},
    {'sha': 'aa:bb:cc:dd:ee:ff', 'spa': '10.0.0.1', 'tpa': '10.0.0.2',
     'hardware_type': 1, 'protocol_type': 0x0800, 'hw_addr_len': 6, 'proto_addr_len': 4,
     'target_hw_addr': '00:00:00:00:00:00'},
])
def test_alias_equivalence(options, arp_request):
    assert ARP(**options).pack() == arp_request


def test_alias_accessors():
    arp = ARP()

    assert arp.src_mac is arp.sha
    assert arp.sender_proto_addr is arp.spa
    assert arp.dst_ip is arp.tpa

    arp.opcode = 2
    assert arp.op.value is ArpOpcode.REPLY

    arp.dst_mac = '01:02:03:04:05:06'
    assert arp.tha.value == b'\x01\x02\x03\x04\x05\x06'


def test_decode(arp_request):
    arp = ARP(arp_request)

    assert arp.op.value is ArpOpcode.REQUEST
    assert arp.sha.to_human() == 'aa:bb:cc:dd:ee:ff'
    assert arp.spa.to_human() == '10.0.0.1'
    assert arp.tha.to_human() == '00:00:00:00:00:00'
    assert arp.tpa.to_human() == '10.0.0.2'
    assert arp.body.value == b''


def test_minimum_length(arp_request):
    with pytest.raises(ParseError):
        ARP(arp_request[:27])

    with pytest.raises(ParseError):
        ARP(b'')


def test_round_trip_w_body(arp_request):
    data = arp_request + b'\x00' * 18  # ethernet padding

    arp = ARP(data)

    assert arp.body.value == b'\x00' * 18
    assert arp.size == len(data)
    assert arp.pack() == data


def test_reconstruction():
    arp = ARP(opcode=ArpOpcode.REPLY, src_mac='00:11:22:33:44:55', src_ip='192.168.1.1',
              dst_mac='66:77:88:99:aa:bb', dst_ip='192.168.1.2', body=b'trailer')

    decoded = ARP(arp.pack())

    assert decoded.fields_values() == arp.fields_values()
    assert decoded == arp


def test_idempotent_encode(arp_request):
    arp = ARP(arp_request)

    assert arp.pack() == arp.pack() == bytes(arp)


def test_unknown_opcode_is_kept(arp_request):
    data = arp_request[:6] + b'\x00\x2a' + arp_request[8:]

    arp = ARP(data)

    assert arp.op.value == 0x2a
    assert arp.pack() == data


def test_summary(arp_request):
    summary = ARP(arp_request).summary()

    assert list(summary.keys()) == [
        'hrd', 'pro', 'hln', 'pln', 'op', 'sha', 'spa', 'tha', 'tpa', 'body',
    ]
    assert summary['hrd'] == '0x0001'
    assert summary['pro'] == '0x0800'
    assert summary['op'] == 'REQUEST'
    assert summary['sha'] == 'aa:bb:cc:dd:ee:ff'
    assert summary['tpa'] == '10.0.0.2'
    assert summary['body'] == "b''"


def test_canonical_name_wins_over_alias():
    assert ARP(htype=5, hrd=1).hrd.value == 1
    assert ARP(hrd=1, htype=5).hrd.value == 1
    assert ARP(htype=5).hrd.value == 5


def test_field_from_another_header(arp_request):
    request = ARP(arp_request)
    reply = ARP(op=ArpOpcode.REPLY, sha=request.tha, tha=request.sha, spa=request.tpa, tpa=request.spa)

    assert reply.sha is not request.tha
    assert reply.sha.father is reply
    assert request.tha.father is request

    reply.sha = '01:02:03:04:05:06'

    assert request.tha.to_human() == '00:00:00:00:00:00'
    assert reply.tha.to_human() == 'aa:bb:cc:dd:ee:ff'


def test_address_as_int():
    arp = ARP(spa=0xc0a80101)

    assert arp.spa.to_human() == '192.168.1.1'
