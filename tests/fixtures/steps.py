"""Sample step functions shared by the pipeline tests."""

import asyncio


class CustomError(Exception):
    """Domain error raised by failing sample steps."""

    key = "value"


# Sync steps ----------------------------------------------------------------
def add(x, y):
    return x + y


def multiply(x, factor):
    return x * factor


def format_value(x, prefix):
    return f"{prefix} {x}"


def concat_three(a, b, c):
    return f"{a} {b} {c}"


def complex_math(a, b, c, d):
    return (a + b) * (c - d)


def increment(x):
    return x + 1


def double(x):
    return x * 2


def return_five():
    return 5


def failing_fn(_x):
    msg = "Sync failure"
    raise CustomError(msg)


# Async steps ---------------------------------------------------------------
async def add_async(x, y):
    await asyncio.sleep(0)
    return x + y


async def multiply_async(x, factor):
    await asyncio.sleep(0)
    return x * factor


async def format_async(x, prefix):
    return f"{prefix} {x}"


async def concat_three_async(a, b, c):
    return f"{a} {b} {c}"


async def complex_math_async(a, b, c, d):
    return (a + b) * (c - d)


async def return_five_async():
    return 5


async def failing_async_fn(_x):
    await asyncio.sleep(0)
    msg = "Async failure"
    raise CustomError(msg)


class Recorder:
    """Callable step that records every value it receives."""

    def __init__(self):
        self.calls = []

    def __call__(self, value, *args):
        self.calls.append((value, *args))
        return value
