import random
import string
import time
from typing import Optional

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def generate_order_number(rng: Optional[random.Random] = None) -> str:
    """Human readable order reference, e.g. ORD-1718000000000-X7K2P9QAB"""
    rng = rng or random
    suffix = "".join(rng.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(9))
    return f"ORD-{_epoch_millis()}-{suffix}"


def generate_transaction_id(rng: Optional[random.Random] = None) -> str:
    """Synthetic transaction id handed out by the mock payment gateway"""
    rng = rng or random
    return f"mock_{_epoch_millis()}_{rng.randrange(1000000)}"
