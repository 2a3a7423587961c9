"""Type 5 (ISO15693) tag constants and configuration."""

# APDU headers for the ACS vendor commands (CLA, INS, P1, P2)
APDU_COMMANDS = {
    'GET_UID': [0xFF, 0xCA, 0x00, 0x00],
    'ISO15693': [0xFF, 0xFB, 0x00, 0x00],  # Needs subcommand, block and data
    'READ_PAGE': [0xFF, 0xB0, 0x00],       # Page-addressed tags only, needs page
    'WRITE_PAGE': [0xFF, 0xD6, 0x00],      # Page-addressed tags only, needs page
}

# ISO15693 subcommands carried in the data field of the FB command
READ_MULTIPLE_BLOCKS = 0x23
WRITE_SINGLE_BLOCK = 0x21

# Status word returned on success
SW_SUCCESS = (0x90, 0x00)

# TLV types
TLV_NULL = 0x00
TLV_NDEF = 0x03
TLV_TERMINATOR = 0xFE
TLV_EXTENDED_LENGTH = 0xFF

# Capability container
CC_MAGIC = 0xE1
CC_MAPPING_RW = 0x40  # Mapping 1.0, read/write access
CC_SIZE = 4
CC_BLOCK = 0
MLEN_UNIT = 8  # MLen counts 8-byte units

# NDEF area layout
BLOCK_SIZE = 4        # SLIX2
NDEF_START_BLOCK = 1
MLEN_BASE_OFFSET = 4 * BLOCK_SIZE  # Bytes counted ahead of the TLV when sizing MLen

# Fixed-size format, matching what phone apps write on a SLIX2
FIXED_NDEF_CAPACITY = 320
FEATURE_NONE = 0x00
FEATURE_MULTIPLE_BLOCK_READ = 0x01
EMPTY_NDEF_MESSAGE = bytes([0xD0, 0x00, 0x00])  # MB=1, ME=1, SR=1, TNF=Empty

# Read Multiple Blocks probe sizes (block count - 1): 64, 32, 16, 8 blocks
READ_PROBE_BLOCKS = (0x3F, 0x1F, 0x0F, 0x07)

# Pattern written by the write/read self test
TEST_BLOCK_PATTERN = bytes([0x11, 0x22, 0x33, 0x44])

# Share of printable characters needed to show a payload as text
PRINTABLE_RATIO = 0.8
