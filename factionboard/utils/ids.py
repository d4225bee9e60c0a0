"""ID 生成工具"""
import random
import string
import time
from typing import Iterable

_BASE36_DIGITS = string.digits + string.ascii_lowercase


def next_id(existing_ids: Iterable[int]) -> int:
    """max(现有ID) + 1，集合为空时返回 1"""
    return max([0, *existing_ids]) + 1


def to_base36(number: int) -> str:
    """把非负整数转换为36进制字符串"""
    if number == 0:
        return "0"

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_account_id() -> str:
    """生成账号ID：毫秒时间戳(36进制) + 随机后缀"""
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36_DIGITS, k=11))
    return timestamp + suffix


def generate_warning_id() -> str:
    """基于毫秒时间戳生成警告ID"""
    return str(int(time.time() * 1000))
