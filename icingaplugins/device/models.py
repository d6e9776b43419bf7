"""SNMP value and MIB enumeration models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class ValueKind(str, Enum):
    OCTET_STRING = "octet-string"
    INTEGER = "integer"
    UNSIGNED = "unsigned"       # Counter32, Gauge32, Unsigned32, TimeTicks
    COUNTER64 = "counter64"
    NO_SUCH_INSTANCE = "no-such-instance"
    NO_SUCH_OBJECT = "no-such-object"
    OTHER = "other"


@dataclass(frozen=True)
class SnmpValue:
    kind: ValueKind
    value: str | int | None = None

    @property
    def is_missing(self) -> bool:
        return self.kind in (ValueKind.NO_SUCH_INSTANCE, ValueKind.NO_SUCH_OBJECT)

    @classmethod
    def string(cls, value: str) -> SnmpValue:
        return cls(ValueKind.OCTET_STRING, value)

    @classmethod
    def integer(cls, value: int) -> SnmpValue:
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def unsigned(cls, value: int) -> SnmpValue:
        return cls(ValueKind.UNSIGNED, value)


# Wire types accepted when a column is read as a number
NUMERIC_KINDS = frozenset({ValueKind.INTEGER, ValueKind.UNSIGNED, ValueKind.COUNTER64})
UNSIGNED_KINDS = frozenset({ValueKind.UNSIGNED, ValueKind.COUNTER64})


class LabelledEnum(IntEnum):
    """Integer MIB enumeration with a CamelCase display label."""

    @property
    def label(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))

    @classmethod
    def describe(cls, value: int) -> str:
        """Label for *value*, tolerating codes the MIB revision doesn't list."""
        try:
            return cls(value).label
        except ValueError:
            return f"Unknown({value})"


class PhysicalClass(LabelledEnum):
    """IANA-ENTITY-MIB PhysicalClass."""
    OTHER = 1
    UNKNOWN = 2
    CHASSIS = 3
    BACKPLANE = 4
    CONTAINER = 5
    POWER_SUPPLY = 6
    FAN = 7
    SENSOR = 8
    MODULE = 9
    PORT = 10
    STACK = 11
    CPU = 12


class EnvMonState(LabelledEnum):
    """CISCO-ENVMON-MIB CiscoEnvMonState."""
    NORMAL = 1
    WARNING = 2
    CRITICAL = 3
    SHUTDOWN = 4
    NOT_PRESENT = 5
    NOT_FUNCTIONING = 6


class PowerOperStatus(LabelledEnum):
    """CISCO-ENTITY-FRU-CONTROL-MIB PowerOperType."""
    OFF_ENV_OTHER = 1
    ON = 2
    OFF_ADMIN = 3
    OFF_DENIED = 4
    OFF_ENV_POWER = 5
    OFF_ENV_TEMP = 6
    OFF_ENV_FAN = 7
    FAILED = 8
    ON_BUT_FAN_FAIL = 9
    OFF_COOLING = 10
    OFF_CONNECTOR_RATING = 11
    ON_BUT_INLINE_POWER_FAIL = 12


class SwitchState(LabelledEnum):
    """CISCO-STACKWISE-MIB cswSwitchState."""
    WAITING = 1
    PROGRESSING = 2
    ADDED = 3
    READY = 4
    SDM_MISMATCH = 5
    VER_MISMATCH = 6
    FEATURE_MISMATCH = 7
    NEW_MASTER_INIT = 8
    PROVISIONED = 9
    INVALID = 10
    REMOVED = 11


class StackPortOperStatus(LabelledEnum):
    """CISCO-STACKWISE-MIB cswStackPortOperStatus."""
    UP = 1
    DOWN = 2
    FORCED_DOWN = 3


class StackPowerPortLinkStatus(LabelledEnum):
    """CISCO-STACKWISE-MIB cswStackPowerPortLinkStatus."""
    UP = 1
    DOWN = 2


class IfAdminStatus(LabelledEnum):
    UP = 1
    DOWN = 2
    TESTING = 3


class IfOperStatus(LabelledEnum):
    UP = 1
    DOWN = 2
    TESTING = 3
    UNKNOWN = 4
    DORMANT = 5
    NOT_PRESENT = 6
    LOWER_LAYER_DOWN = 7


class MemoryMib(str, Enum):
    CISCO_PROCESS_MIB = "cisco-process-mib"
    CISCO_MEMORY_POOL_MIB = "cisco-memory-pool-mib"


class SecurityLevel(str, Enum):
    NO_AUTH_NO_PRIV = "noauthnopriv"
    AUTH_NO_PRIV = "authnopriv"
    AUTH_PRIV = "authpriv"


class AuthProtocol(str, Enum):
    NOAUTH = "noauth"
    MD5 = "md5"
    SHA = "sha"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"


class PrivProtocol(str, Enum):
    NOPRIV = "nopriv"
    DES = "des"
    AES = "aes"
    AES192 = "aes192"
    AES256 = "aes256"
    AES192C = "aes192c"   # Cisco ("Reeder") key extension
    AES256C = "aes256c"
