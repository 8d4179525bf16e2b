"""
Domain value objects.
"""

from entremetteur.domain.value_objects.connection_state import ConnectionState
from entremetteur.domain.value_objects.display_name import DisplayName
from entremetteur.domain.value_objects.public_key_record import PublicKeyRecord
from entremetteur.domain.value_objects.rate_record import RateRecord

__all__ = ["ConnectionState", "DisplayName", "PublicKeyRecord", "RateRecord"]
