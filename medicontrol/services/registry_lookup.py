"""
Regulatory registry lookup.

Answers name and manufacturer for a registry code from a small in-memory
table of known products. Nothing here touches the network.
"""

import logging
from dataclasses import dataclass

from medicontrol.core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger("app")


@dataclass(frozen=True)
class RegistryRecord:
    registry_code: str
    name: str
    manufacturer: str
    therapeutic_class: str = ""


_RECORDS = (
    RegistryRecord("1097401420043", "Paracetamol (Tylenol) 500mg", "Janssen-Cilag", "Analgésico"),
    RegistryRecord("1024701490043", "Dipirona Monoidratada (Novalgina)", "Sanofi", "Analgésico"),
    RegistryRecord("1004307270013", "Amoxicilina 500mg", "EMS", "Antibiótico"),
    RegistryRecord("1781700780021", "Losartana Potássica 50mg", "Medley", "Anti-hipertensivo"),
    RegistryRecord("1058302990029", "Ibuprofeno 600mg", "Medley", "Anti-inflamatório"),
    RegistryRecord("1.0047.0118", "Dipirona Sódica 500mg", "Sanofi", "Analgésico"),
)

REGISTRY = {record.registry_code: record for record in _RECORDS}


def lookup(code: str) -> RegistryRecord:
    code = (code or "").strip()
    if not code:
        raise ValidationError("Registry code must not be empty")

    record = REGISTRY.get(code)
    if record is None:
        logger.info(f"Registry code {code} not found")
        raise NotFoundError(f"Registry code {code} not found", status_code=400)

    return record
