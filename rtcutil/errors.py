"""Error kinds raised throughout the package."""

from __future__ import annotations

from enum import Enum


class _MessageKind(Enum):
    """Enum whose members carry a message template with a ``{detail}`` slot."""

    def __new__(cls, template: str):
        member = object.__new__(cls)
        member._value_ = len(cls.__members__) + 1
        member.template = template
        return member

    def render(self, detail: str = "") -> str:
        """Return the message for this kind with ``detail`` filled in."""
        return self.template.format(detail=detail)


class ErrorKind(_MessageKind):
    """Every failure the utilities can report."""

    BUFFER_FULL = "buffer: full"
    BUFFER_CLOSED = "buffer: closed"
    BUFFER_SHORT = "buffer: short"
    PACKET_TOO_BIG = "packet too big"
    TIMEOUT = "i/o timeout"
    CLOSED_LISTENER = "udp: listener closed"
    LISTEN_QUEUE_EXCEEDED = "udp: listen queue exceeded"
    CLOSED_LISTENER_ACCEPT_CH = "udp: listener accept ch closed"
    OBS_CANNOT_BE_NIL = "obs cannot be nil"
    USE_CLOSED_NETWORK_CONN = "se of closed network connection"
    ADDR_NOT_UDP_ADDR = "addr is not a net.UDPAddr"
    LOC_ADDR = "something went wrong with locAddr"
    ALREADY_CLOSED = "already closed"
    NO_REM_ADDR = "no remAddr defined"
    ADDRESS_ALREADY_IN_USE = "address already in use"
    NO_SUCH_UDP_CONN = "no such UDPConn"
    CANNOT_REMOVE_UNSPECIFIED_IP = "cannot remove unspecified IP by the specified IP"
    NO_ADDRESS_ASSIGNED = "no address assigned"
    NAT_REQUIRES_MAPPING = "1:1 NAT requires more than one mapping"
    MISMATCH_LENGTH_IP = "length mismtach between mappedIPs and localIPs"
    NON_UDP_TRANSLATION_NOT_SUPPORTED = "non-udp translation is not supported yet"
    NO_ASSOCIATED_LOCAL_ADDRESS = "no associated local address"
    NO_NAT_BINDING_FOUND = "no NAT binding found"
    HAS_NO_PERMISSION = "has no permission"
    HOSTNAME_EMPTY = "host name must not be empty"
    FAILED_TO_PARSE_IPADDR = "failed to parse IP address"
    NO_INTERFACE = "no interface is available"
    NOT_FOUND = "not found"
    UNEXPECTED_NETWORK = "unexpected network"
    CANT_ASSIGN_REQUESTED_ADDR = "can't assign requested address"
    UNKNOWN_NETWORK = "unknown network"
    NO_ROUTER_LINKED = "no router linked"
    INVALID_PORT_NUMBER = "invalid port number"
    UNEXPECTED_TYPE_SWITCH_FAILURE = "unexpected type-switch failure"
    BIND_FAILED = "bind failed"
    END_PORT_LESS_THAN_START = "end port is less than the start"
    PORT_SPACE_EXHAUSTED = "port space exhausted"
    VNET_DISABLED = "vnet is not enabled"
    INVALID_LOCAL_IP_IN_STATIC_IPS = "invalid local IP in static_ips"
    LOCAL_IP_BEYOND_STATIC_IPS_SUBSET = "mapped in static_ips is beyond subnet"
    LOCAL_IP_NO_STATICS_IPS_ASSOCIATED = "all static_ips must have associated local IPs"
    ROUTER_ALREADY_STARTED = "router already started"
    ROUTER_ALREADY_STOPPED = "router already stopped"
    STATIC_IP_IS_BEYOND_SUBNET = "static IP is beyond subnet"
    ADDRESS_SPACE_EXHAUSTED = "address space exhausted"
    NO_IPADDR_ETH0 = "no IP address is assigned for eth0"
    INVALID_MASK = "Invalid mask"
    PARSE_IPNET = "parse ipnet: {detail}"
    PARSE_IP = "parse ip: {detail}"
    PARSE_INT = "parse int: {detail}"
    IO = "io error: {detail}"
    UTF8 = "utf8: {detail}"
    STD = "{detail}"
    OTHER = "{detail}"


class UtilError(Exception):
    """The error raised by the package, tagged with an :class:`ErrorKind`.

    Errors of kind ``STD`` wrap a foreign error and never compare equal.
    """

    def __init__(self, kind: ErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = str(detail)
        super().__init__(kind.render(self.detail))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UtilError):
            return NotImplemented
        if self.kind is ErrorKind.STD or other.kind is ErrorKind.STD:
            return False
        return self.kind is other.kind and self.detail == other.detail

    def __hash__(self) -> int:
        return hash((self.kind, self.detail))

    def __repr__(self) -> str:
        return f"UtilError({self.kind.name}, {self.detail!r})"


class KeyingMaterialExporterErrorKind(_MessageKind):
    """Failures while exporting keying material."""

    HANDSHAKE_IN_PROGRESS = "tls handshake is in progress"
    CONTEXT_UNSUPPORTED = "context is not supported for export_keying_material"
    RESERVED_EXPORT_KEYING_MATERIAL = (
        "export_keying_material can not be used with a reserved label"
    )
    CIPHER_SUITE_UNSET = "no cipher suite for export_keying_material"
    IO = "export_keying_material io: {detail}"
    HASH = "export_keying_material hash: {detail}"


class KeyingMaterialExporterError(Exception):
    """Raised when keying material cannot be exported."""

    def __init__(self, kind: KeyingMaterialExporterErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = str(detail)
        super().__init__(kind.render(self.detail))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyingMaterialExporterError):
            return NotImplemented
        return self.kind is other.kind and self.detail == other.detail

    def __hash__(self) -> int:
        return hash((self.kind, self.detail))

    def __repr__(self) -> str:
        return f"KeyingMaterialExporterError({self.kind.name}, {self.detail!r})"