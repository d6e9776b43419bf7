"""OID constants used by the checks."""


class SystemOIDs:
    """MIB-II system group."""
    SYS_NAME = "1.3.6.1.2.1.1.5.0"


class EntityOIDs:
    """ENTITY-MIB entPhysicalTable columns."""
    ENT_PHYSICAL_DESCR = "1.3.6.1.2.1.47.1.1.1.1.2"
    ENT_PHYSICAL_CLASS = "1.3.6.1.2.1.47.1.1.1.1.5"
    ENT_PHYSICAL_MODEL_NAME = "1.3.6.1.2.1.47.1.1.1.1.13"


class EnvMonOIDs:
    """CISCO-ENVMON-MIB."""
    TEMPERATURE_STATUS_VALUE = "1.3.6.1.4.1.9.9.13.1.3.1.3"   # Gauge32
    TEMPERATURE_THRESHOLD = "1.3.6.1.4.1.9.9.13.1.3.1.4"      # Integer32
    SUPPLY_STATE = "1.3.6.1.4.1.9.9.13.1.5.1.3"


class FruControlOIDs:
    """CISCO-ENTITY-FRU-CONTROL-MIB, indexed by entPhysicalIndex."""
    FRU_POWER_OPER_STATUS = "1.3.6.1.4.1.9.9.117.1.1.2.1.2"


class MemoryOIDs:
    """CISCO-PROCESS-MIB (KB) and CISCO-MEMORY-POOL-MIB (bytes)."""
    CPM_CPU_MEMORY_USED = "1.3.6.1.4.1.9.9.109.1.1.1.1.12"
    CPM_CPU_MEMORY_FREE = "1.3.6.1.4.1.9.9.109.1.1.1.1.13"
    MEMORY_POOL_USED = "1.3.6.1.4.1.9.9.48.1.1.1.5"
    MEMORY_POOL_FREE = "1.3.6.1.4.1.9.9.48.1.1.1.6"


class StackwiseOIDs:
    """CISCO-STACKWISE-MIB."""
    SWITCH_STATE = "1.3.6.1.4.1.9.9.500.1.2.1.1.6"
    STACK_PORT_OPER_STATUS = "1.3.6.1.4.1.9.9.500.1.2.2.1.1"
    STACK_POWER_PORT_LINK_STATUS = "1.3.6.1.4.1.9.9.500.1.3.2.1.5"


class InterfaceOIDs:
    """IF-MIB."""
    IF_ADMIN_STATUS = "1.3.6.1.2.1.2.2.1.7"
    IF_OPER_STATUS = "1.3.6.1.2.1.2.2.1.8"
    IF_ALIAS = "1.3.6.1.2.1.31.1.1.1.18"
