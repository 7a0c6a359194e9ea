# rtcutil

Building blocks for asyncio networking code in real-time communication stacks.

## What is inside

- `rtcutil.buffer.Buffer`: a packet FIFO that keeps packet boundaries. `write(packet)`
  is a plain call that queues a copy and returns its length; `await read(size, timeout)`
  returns the next packet, waiting for one if needed. Limits on packet count
  (`limit_count`) and queued bytes (`limit_size`, 4 MiB when zero) raise
  `UtilError` of kind `BUFFER_FULL`; packets of 65536 bytes or more raise
  `PACKET_TOO_BIG`. A packet longer than `size` is discarded with `BUFFER_SHORT`,
  an expired `timeout` (seconds) raises `TIMEOUT`, and after `close()` the remaining
  packets can still be read before `BUFFER_CLOSED` is raised. `count`, `size` and
  `closed` report the current state.
- `rtcutil.fixed_big_int.FixedBigInt`: a fixed-width bit set with `lsh`, `bit` and
  `set_bit`; `str()` gives it as upper-case hex, 16 digits per 64-bit word.
- `rtcutil.conn`: the abstract `Conn` and `Listener` interfaces; `bind_udp` for an
  asyncio `UdpSocket`; `pipe()` for a pair of in-memory `PipeConn` ends;
  `DisconnectedPacketConn`, whose `send` replies to the sender of the last packet
  received with `recv`; and `lookup_host(use_ipv4, host)`. Addresses are
  `(host, port)` tuples or `"host:port"` strings.
- `rtcutil.bridge`: `create_bridge(loss_chance, filter_cb0, filter_cb1)` returns a
  `Bridge` and two `BridgeConn` endpoints. Packets sent on one side are queued until
  `tick()` or `process()` hands them to the other side. The bridge can drop queued
  packets (`drop_offset`), drop or reverse the next writes (`drop_next_nwrites`,
  `reorder_next_nwrites`), reverse the current queue (`reorder`) and `clear` both
  queues. `loss_chance` is the percentage of sends silently lost.
- `rtcutil.udp_listener`: `listen(laddr)` and `ListenConfig(backlog, accept_filter)`
  give a connection-oriented listener over one UDP socket. Each new remote address
  becomes a `UdpConn` handed out by `accept()`; `accept_filter` may be a plain or an
  async callable that decides from the first packet whether to create it.
- `rtcutil.marshal`: the `Marshal` and `Unmarshal` base classes, and the `Chain` and
  `Take` sized views over buffers.
- `rtcutil.ifaces`: `ifaces()` lists the local interface addresses as `Interface`
  records (name, `Kind`, address, netmask and an optional `NextHop`).
- `rtcutil.errors`: `UtilError` tagged with an `ErrorKind`, and
  `KeyingMaterialExporterError` with a `KeyingMaterialExporterErrorKind`.

## Installation

```
pip install rtcutil
```

## Examples

```python
import asyncio
from rtcutil.buffer import Buffer

async def demo():
    buf = Buffer(0, 0)
    buf.write(b"\x00\x01")
    print(await buf.read(4, None))  # b'\x00\x01'

asyncio.run(demo())
```

```python
import asyncio
from rtcutil.conn import pipe

async def demo():
    a, b = pipe()
    await a.send(b"hello")
    print(await b.recv(100))  # b'hello'

asyncio.run(demo())
```

```python
import asyncio
from rtcutil.bridge import create_bridge

async def demo():
    bridge, left, right = create_bridge()
    await left.send(b"ping")
    await bridge.process()
    print(await right.recv())  # b'ping'

asyncio.run(demo())
```

## Command line

List the network interfaces of this machine, one numbered line per address:

```
rtcutil-ifaces
```

## What it does not do

- `FixedBigInt` is only the bit set; the package has no replay detector built on it.
- `Bridge` simulates a single link between two endpoints. There is no virtual
  network with routers, NAT or name resolution.

## Running the tests

```
pip install rtcutil[test]
pytest
```