"""Shared constants for owon-dge.

USB identity, endpoint layout and protocol limits of the OWON DGE20xx
signal generator family.  The USB IDs are the same ones the OWON
oscilloscopes enumerate with.
"""

# USB identity (Owon Technologies / "PDS Digital Oscilloscope")
USB_VENDOR_ID = 0x5345
USB_PRODUCT_ID = 0x1234

# Bulk endpoints on interface 0
EP_BULK_OUT = 0x01
EP_BULK_IN = 0x81

# USB configuration values (SetConfiguration / ClaimInterface)
USB_CONFIGURATION = 1
USB_INTERFACE = 0

# Standard device descriptor length (bLength)
DEVICE_DESCRIPTOR_SIZE = 0x12

# Timeout (ms) for every bulk write and read
DEFAULT_TIMEOUT_MS = 500

# Upper bound on matching devices collected by a single scan
MAX_DEVICES = 10

# Channels on the DGE20xx front panel
CHANNELS = (1, 2)

# Longest SCPI command text we send (bytes, without terminator)
MAX_COMMAND_LENGTH = 1023

# Identity query and its response buffer
IDN_QUERY = "*IDN?"
IDN_RESPONSE_SIZE = 256

# *IDN? response prefixes, checked in this order
IDN_SIGNATURE_DGE2035 = b"OWON,DGE2035,"
IDN_SIGNATURE_DGE2070 = b"OWON,DGE2070,"

# Exit status used by the CLI when no usable generator is found
EXIT_NO_DEVICE = 3
