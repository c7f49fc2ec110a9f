"""Pricing region normalization.

Vendors carry a free-form region label; prices are keyed by one of five
canonical pricing regions. Rio Grande do Sul is priced twice, depending on
whether the customer holds a state tax registration (Inscrição Estadual).
"""

import unicodedata
from enum import Enum


class PricingRegion(str, Enum):
    """Canonical codes accepted by the price lookup."""

    NORTE_NORDESTE = "norte-nordeste"
    SUL_SUDESTE = "sul-sudeste"
    CENTRO_OESTE = "centro-oeste"
    RS_COM_IE = "rs-com-ie"
    RS_SEM_IE = "rs-sem-ie"

    def __str__(self) -> str:
        return self.value


DEFAULT_REGION = PricingRegion.SUL_SUDESTE

PRICING_REGIONS: tuple[PricingRegion, ...] = tuple(PricingRegion)

_REGION_LABELS = {
    PricingRegion.NORTE_NORDESTE: "Norte/Nordeste",
    PricingRegion.SUL_SUDESTE: "Sul/Sudeste",
    PricingRegion.CENTRO_OESTE: "Centro-Oeste",
    PricingRegion.RS_COM_IE: "Rio Grande do Sul (Com IE)",
    PricingRegion.RS_SEM_IE: "Rio Grande do Sul (Sem IE)",
}

_RS_LABELS = frozenset({
    "rio grande do sul",
    "rs",
    "rio grande do sul (com ie)",
    "rio grande do sul (sem ie)",
})
_NORTH_LABELS = frozenset({
    "norte",
    "nordeste",
    "norte-nordeste",
    "norte/nordeste",
    "norte e nordeste",
})
_SOUTH_LABELS = frozenset({
    "sul",
    "sudeste",
    "sul-sudeste",
    "sul/sudeste",
    "sul e sudeste",
})
_CENTER_WEST_LABELS = frozenset({"centro-oeste", "centro oeste"})

# UF code -> (state name, pricing region)
_STATES: dict[str, tuple[str, PricingRegion]] = {
    "RS": ("Rio Grande do Sul", PricingRegion.RS_COM_IE),
    "SC": ("Santa Catarina", PricingRegion.SUL_SUDESTE),
    "PR": ("Paraná", PricingRegion.SUL_SUDESTE),
    "SP": ("São Paulo", PricingRegion.SUL_SUDESTE),
    "MG": ("Minas Gerais", PricingRegion.SUL_SUDESTE),
    "RJ": ("Rio de Janeiro", PricingRegion.SUL_SUDESTE),
    "ES": ("Espírito Santo", PricingRegion.SUL_SUDESTE),
    "MS": ("Mato Grosso do Sul", PricingRegion.CENTRO_OESTE),
    "MT": ("Mato Grosso", PricingRegion.CENTRO_OESTE),
    "GO": ("Goiás", PricingRegion.CENTRO_OESTE),
    "DF": ("Distrito Federal", PricingRegion.CENTRO_OESTE),
    "AC": ("Acre", PricingRegion.NORTE_NORDESTE),
    "AM": ("Amazonas", PricingRegion.NORTE_NORDESTE),
    "AP": ("Amapá", PricingRegion.NORTE_NORDESTE),
    "PA": ("Pará", PricingRegion.NORTE_NORDESTE),
    "RO": ("Rondônia", PricingRegion.NORTE_NORDESTE),
    "RR": ("Roraima", PricingRegion.NORTE_NORDESTE),
    "TO": ("Tocantins", PricingRegion.NORTE_NORDESTE),
    "AL": ("Alagoas", PricingRegion.NORTE_NORDESTE),
    "BA": ("Bahia", PricingRegion.NORTE_NORDESTE),
    "CE": ("Ceará", PricingRegion.NORTE_NORDESTE),
    "MA": ("Maranhão", PricingRegion.NORTE_NORDESTE),
    "PB": ("Paraíba", PricingRegion.NORTE_NORDESTE),
    "PE": ("Pernambuco", PricingRegion.NORTE_NORDESTE),
    "PI": ("Piauí", PricingRegion.NORTE_NORDESTE),
    "RN": ("Rio Grande do Norte", PricingRegion.NORTE_NORDESTE),
    "SE": ("Sergipe", PricingRegion.NORTE_NORDESTE),
}


def _fold(label: str) -> str:
    """Lowercase, trim and strip accents."""
    decomposed = unicodedata.normalize("NFKD", label.strip().lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


_STATE_NAMES: dict[str, str] = {_fold(name): uf for uf, (name, _) in _STATES.items()}


def is_dual_tax_region(raw_label: str | None) -> bool:
    """Check whether a vendor label denotes Rio Grande do Sul."""
    if not raw_label:
        return False
    return _fold(raw_label) in _RS_LABELS


def normalize_region(raw_label: str | None, has_tax_registration: bool = True) -> PricingRegion:
    """Map a vendor's region label to a canonical pricing region.

    Rules are checked in order and the first match wins. Unknown or empty
    labels fall back to Sul/Sudeste.

    >>> normalize_region("Rio Grande do Sul", False)
    <PricingRegion.RS_SEM_IE: 'rs-sem-ie'>
    """
    if not raw_label:
        return DEFAULT_REGION

    label = _fold(raw_label)

    if label in _RS_LABELS:
        return PricingRegion.RS_COM_IE if has_tax_registration else PricingRegion.RS_SEM_IE
    if label in _NORTH_LABELS:
        return PricingRegion.NORTE_NORDESTE
    if label in _SOUTH_LABELS:
        return PricingRegion.SUL_SUDESTE
    if label in _CENTER_WEST_LABELS:
        return PricingRegion.CENTRO_OESTE

    return DEFAULT_REGION


def region_for_state(state: str | None) -> PricingRegion:
    """Map a two-letter UF code (or a full state name) to a pricing region.

    Rio Grande do Sul always resolves to the with-registration code; callers
    needing the other variant must use ``normalize_region``.
    """
    if not state:
        return DEFAULT_REGION

    folded = _fold(state)
    uf = folded.upper() if len(folded) == 2 else _STATE_NAMES.get(folded)
    if uf is None or uf not in _STATES:
        return DEFAULT_REGION
    return _STATES[uf][1]


def is_valid_region(code: str) -> bool:
    return code in {r.value for r in PricingRegion}


def region_label(code: str) -> str:
    """Human-readable name for a region code; unknown codes are returned as is."""
    try:
        return _REGION_LABELS[PricingRegion(code)]
    except ValueError:
        return code


def states_for_region(code: str) -> list[str]:
    """UF codes priced under a region. Both Rio Grande do Sul codes cover RS."""
    if code in (PricingRegion.RS_COM_IE.value, PricingRegion.RS_SEM_IE.value):
        return ["RS"]
    return [uf for uf, (_, region) in _STATES.items() if region.value == code]
