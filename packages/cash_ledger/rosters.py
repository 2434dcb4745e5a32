"""Standing client rosters per delivery zone.

A zone's roster seeds the rows of every new delivery day. Zones without an
entry start empty and only show clients carried over from earlier days.
"""

from __future__ import annotations

from collections.abc import Mapping

# Duplicates are intentional: they mirror the printed route sheet and collapse
# to one row through the normalized client key.
MALVINAS_CLIENTS: tuple[str, ...] = (
    "Agustin Malvinas", "Ale Malvinas", "Arriola", "Marcos Castro", "Baldo",
    "Carlos Patria", "Pedro Cochabamba", "Carnes Walter", "Carolina Anacreonte",
    "Cecilia V. Retiro", "Centro Comunitario", "Chavez", "Claudia Yapeyu",
    "Dominguez", "Doña Chocha", "El Indio", "Fabrica de Pastas", "Nestor",
    "Fany", "Carnes Cordoba", "Gabriel Cofico", "Gabriel Nuevo", "Baldo",
    "Inspector Vaca", "Lorena Gaboto", "Polleria El Angel", "Macarena",
    "Marcela", "Marcos Suipacha", "Matias Chino", "Matias Lopez", "Sol",
    "La Boqueria", "Oviedo", "Polaco", "Polleria Serapio", "Pablo Sahar",
    "Ric Cervantes", "Colon B", "Colon Federico", "Eric Colon", "Carlos Eco",
    "Baigorri 133", "Carnes Emanuel", "La Rivieri", "Cipruz", "Jorge Salcedo",
    "Ruta 20", "Ochetti Paola", "Don segundo", "El Dani",
)

# Empty rows appended to a new day of a rostered zone for walk-in clients.
ROSTER_BLANK_ROWS = 4

PRODUCT_CATEGORIES: tuple[str, ...] = ("Pollo", "Pechuga y Muslo")

_ROSTERS: Mapping[str, tuple[str, ...]] = {
    "malvinas": MALVINAS_CLIENTS,
}


def roster_for(zone: str) -> tuple[str, ...]:
    return _ROSTERS.get(zone.strip().lower(), ())


def blank_rows_for(zone: str) -> int:
    return ROSTER_BLANK_ROWS if roster_for(zone) else 0


__all__ = [
    "MALVINAS_CLIENTS",
    "PRODUCT_CATEGORIES",
    "ROSTER_BLANK_ROWS",
    "blank_rows_for",
    "roster_for",
]
