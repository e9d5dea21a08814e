"""
SMB Trigger - turn SMB2 change notifications into stable file events.
"""

from smb_trigger.config.constants import VERSION

__version__ = VERSION
