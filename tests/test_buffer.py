import asyncio

import pytest

from rtcutil.buffer import MAX_SIZE, Buffer
from rtcutil.errors import ErrorKind, UtilError


def _fails(kind, func, *args):
    with pytest.raises(UtilError) as info:
        func(*args)
    assert info.value.kind is kind


async def _afails(kind, awaitable):
    with pytest.raises(UtilError) as info:
        await awaitable
    assert info.value.kind is kind


async def _run_steps(buffer, steps, measure):
    """Run (action, data, expected measure) steps against ``buffer``."""
    for action, data, expected in steps:
        if action == "write":
            assert buffer.write(data) == len(data)
        elif action == "full":
            _fails(ErrorKind.BUFFER_FULL, buffer.write, data)
        else:
            assert await buffer.read(4) == data
        assert measure(buffer) == expected, (action, data)


@pytest.mark.asyncio
async def test_buffer():
    buffer = Buffer(0, 0)

    assert buffer.write(bytes([0, 1])) == 2
    assert await buffer.read(4) == bytes([0, 1])

    await _afails(ErrorKind.TIMEOUT, buffer.read(4, timeout=1e-9))

    for packet in (bytes([2, 3, 4]), bytes([5, 6, 7])):
        assert buffer.write(packet) == 3
    for packet in (bytes([2, 3, 4]), bytes([5, 6, 7])):
        assert await buffer.read(4) == packet

    assert buffer.write(bytes([3])) == 1
    buffer.close()

    _fails(ErrorKind.BUFFER_CLOSED, buffer.write, bytes([4]))
    assert await buffer.read(4) == bytes([3])
    await _afails(ErrorKind.BUFFER_CLOSED, buffer.read(4))


@pytest.mark.asyncio
async def test_buffer_interleaved_order():
    buffer = Buffer(0, 0)
    p1, p2, p3, p4 = b"\x01\x02\x03", b"\x04\x05\x06", b"\x07\x08\x09", b"\x0a\x0b\x0c"

    for packet in (p1, p2, p3):
        buffer.write(packet)
    assert [await buffer.read(10) for _ in range(2)] == [p1, p2]

    buffer.write(p4)
    assert [await buffer.read(10) for _ in range(2)] == [p3, p4]
    assert (buffer.count, buffer.size) == (0, 0)


@pytest.mark.asyncio
async def test_buffer_grows_and_keeps_order():
    buffer = Buffer(0, 0)
    packets = [bytes([i]) * 100 for i in range(100)]
    assert [buffer.write(packet) for packet in packets] == [100] * 100
    assert buffer.count == 100
    assert buffer.size == 100 * 102
    assert [await buffer.read(100) for _ in packets] == packets


@pytest.mark.asyncio
async def test_buffer_async():
    buffer = Buffer(0, 0)

    async def reader():
        first = await buffer.read(4)
        with pytest.raises(UtilError) as info:
            await buffer.read(4)
        return first, info.value.kind

    task = asyncio.create_task(reader())
    await asyncio.sleep(0.001)
    assert buffer.write(bytes([0, 1])) == 2
    await asyncio.sleep(0.001)
    buffer.close()

    assert await task == (bytes([0, 1]), ErrorKind.BUFFER_CLOSED)


@pytest.mark.asyncio
async def test_buffer_limit_count():
    buffer = Buffer(2, 0)
    assert buffer.count == 0

    steps = [
        ("write", bytes([0, 1]), 1),
        ("write", bytes([2, 3]), 2),
        ("full", bytes([4, 5]), 2),
        ("read", bytes([0, 1]), 1),
        ("write", bytes([6, 7]), 2),
        ("full", bytes([8, 9]), 2),
        ("read", bytes([2, 3]), 1),
        ("read", bytes([6, 7]), 0),
    ]
    await _run_steps(buffer, steps, lambda b: b.count)

    buffer.close()
    assert buffer.closed


@pytest.mark.asyncio
async def test_buffer_limit_size():
    buffer = Buffer(0, 11)
    assert buffer.size == 0

    steps = [
        ("write", bytes([0, 1]), 4),
        ("write", bytes([2, 3]), 8),
        ("full", bytes([4, 5]), 8),
        ("write", bytes([6]), 11),
        ("read", bytes([0, 1]), 7),
        ("write", bytes([7, 8]), 11),
        ("full", bytes([9, 10]), 11),
        ("read", bytes([2, 3]), 7),
        ("read", bytes([6]), 4),
        ("read", bytes([7, 8]), 0),
    ]
    await _run_steps(buffer, steps, lambda b: b.size)

    buffer.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("size", [128 * 1024, 1024 * 1024, 8 * 1024 * 1024, 0])
async def test_buffer_limit_sizes(size):
    header_size = 2
    packet_size = 0x8000

    buffer = Buffer(0, 0)
    if size == 0:
        size = MAX_SIZE
    else:
        buffer.limit_size = size + header_size

    n_packets = size // (packet_size + header_size)
    pkt = bytes(packet_size)
    for _ in range(n_packets):
        assert buffer.write(pkt) == packet_size

    _fails(ErrorKind.BUFFER_FULL, buffer.write, pkt)

    for _ in range(n_packets):
        assert len(await buffer.read(size, timeout=5)) == packet_size


@pytest.mark.asyncio
async def test_buffer_misc():
    buffer = Buffer(0, 0)
    assert buffer.write(bytes([0, 1, 2, 3])) == 4

    await _afails(ErrorKind.BUFFER_SHORT, buffer.read(3))
    assert buffer.count == 0

    for _ in range(2):
        buffer.close()
        assert buffer.closed


def test_packet_too_big():
    buffer = Buffer(0, 0)
    _fails(ErrorKind.PACKET_TOO_BIG, buffer.write, bytes(0x10000))
    assert buffer.write(bytes(0xFFFF)) == 0xFFFF


def test_limit_setters():
    buffer = Buffer(0, 0)
    buffer.limit_count = 1
    assert buffer.limit_count == 1
    buffer.write(b"a")
    _fails(ErrorKind.BUFFER_FULL, buffer.write, b"b")

    buffer.limit_count = 0
    buffer.limit_size = 5
    assert buffer.limit_size == 5
    _fails(ErrorKind.BUFFER_FULL, buffer.write, b"bc")


@pytest.mark.asyncio
@pytest.mark.parametrize("times", [1, 10, 100])
async def test_buffer_write_then_read(times):
    buffer = Buffer(0, 0)
    for _ in range(times):
        buffer.write(bytes([0, 1]))
        assert await buffer.read(4) == bytes([0, 1])
    assert buffer.count == 0