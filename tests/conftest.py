import logging
import os

import pytest

from layerstruct.registry import BindingRegistry


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)


# the ARP request 10.0.0.1 (aa:bb:cc:dd:ee:ff) -> 10.0.0.2
ARP_REQUEST = bytes.fromhex(
    '0001 0800 06 04 0001'
    'aabbccddeeff 0a000001'
    '000000000000 0a000002'
)


@pytest.fixture
def arp_request():
    return ARP_REQUEST


@pytest.fixture
def fresh_registry():
    return BindingRegistry()
