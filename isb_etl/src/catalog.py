"""
Dataset Catalog Module
Static credential tables for the LKPP ISB open-data API.

Every (region, dataset type) pair is served by its own API key and numeric
dataset code. The two data families (RUP planning data and SPSE tender data)
share the same URL layout and differ only in their catalog and in the
"tipe" route segment.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from .errors import UnknownDatasetType, UnknownRegion

DEFAULT_YEARS: Tuple[int, ...] = (2023, 2024, 2025)


@dataclass(frozen=True)
class DatasetCatalogEntry:
    """Credential token and dataset code for one (region, dataset type)."""
    api_key: str
    code: str


class DatasetCatalog:
    """
    Immutable mapping keyed by (region, dataset type).
    """

    def __init__(self, entries: Mapping[Tuple[str, str], DatasetCatalogEntry]):
        self._entries = MappingProxyType(dict(entries))
        self._regions = frozenset(region for region, _ in self._entries)

    @classmethod
    def from_nested(cls, table: Dict[str, Dict[str, Tuple[str, str]]]) -> "DatasetCatalog":
        """
        Build a catalog from a ``{region: {dataset_type: (api_key, code)}}`` table.
        """
        entries = {
            (region, dataset_type): DatasetCatalogEntry(api_key=api_key, code=code)
            for region, datasets in table.items()
            for dataset_type, (api_key, code) in datasets.items()
        }
        return cls(entries)

    def lookup(self, region: str, dataset_type: str) -> DatasetCatalogEntry:
        """
        Look up the entry for a (region, dataset type) pair.

        Raises:
            UnknownRegion: If the region has no catalog entries
            UnknownDatasetType: If the dataset type is not catalogued for the region
        """
        if region not in self._regions:
            raise UnknownRegion(region)
        try:
            return self._entries[(region, dataset_type)]
        except KeyError:
            raise UnknownDatasetType(region, dataset_type) from None

    @property
    def regions(self) -> Tuple[str, ...]:
        return tuple(sorted(self._regions))

    def dataset_types(self, region: str) -> Tuple[str, ...]:
        """Dataset types catalogued for a region, in catalog order."""
        return tuple(dtype for reg, dtype in self._entries if reg == region)

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class DatasetFamily:
    """
    One data family: its catalog, route segment and default enumerations.

    The enumerations are defaults only; the fetch loop receives them as
    arguments.
    """
    name: str
    type_segment: str
    catalog: DatasetCatalog = field(compare=False)
    regions: Tuple[str, ...]
    dataset_types: Tuple[str, ...]
    years: Tuple[int, ...] = DEFAULT_YEARS


# RUP (Rencana Umum Pengadaan) planning datasets
RUP_CATALOG = DatasetCatalog.from_nested({
    "D197": {
        "RUP-PaketPenyedia-Terumumkan": ("999bd6d6-9e67-4c7d-83bd-650430ce2fe7", "3342"),
        "RUP-PaketSwakelola-Terumumkan": ("07f8350f-d005-42ce-bcaf-a39eaf3fbb02", "3345"),
        "RUP-StrukturAnggaranPD": ("3adfa365-7962-4994-8bce-4e6ca5e10320", "6987"),
        "RUP-MasterSatker": ("ba2c6327-9451-49c9-8c61-408936baaff6", "4847"),
        "RUP-ProgramMaster": ("6d5fd703-2fbe-44fe-8b93-a88ecaaacab3", "3346"),
        "RUP-KegiatanMaster": ("024e7c91-226e-417d-be1a-1667a84595ee", "3333"),
        "RUP-SubKegiatanMaster": ("d5c9a703-07bb-4e87-8e08-ff04b23741b9", "3325"),
        "RUP-PaketAnggaranPenyedia": ("05fe5f87-9547-4a56-991d-041433864211", "3350"),
    },
})

# SPSE (Sistem Pengadaan Secara Elektronik) tender datasets
SPSE_CATALOG = DatasetCatalog.from_nested({
    "97": {
        "SPSE-TenderPengumuman": ("2a7b43bc-e129-4432-98c0-870a8bb61096", "3339"),
        "SPSE-TenderSelesai": ("dc58375a-199b-4696-b1a1-f17e36e580e8", "3347"),
        "SPSE-TenderSelesaiNilai": ("3c675a2d-0ef8-4190-9471-4471783d5d83", "3338"),
        "SPSE-TenderEkontrak-SPPBJ": ("df4f428b-1044-44ba-8e7e-21ce86ad52b9", "5843"),
        "SPSE-TenderEkontrak-Kontrak": ("a9e5b43f-20f6-45df-84a9-8909ad4ad719", "5493"),
        "SPSE-TenderEkontrak-SPMKSPP": ("0517feff-8aec-4834-8610-1ea2f170c1f2", "6043"),
        "SPSE-TenderEkontrak-BAPBAST": ("585d9bbb-831a-48e1-b705-1c3b7437315d", "5943"),
    },
})

RUP = DatasetFamily(
    name="rup",
    type_segment="4:12",
    catalog=RUP_CATALOG,
    regions=("D197",),
    dataset_types=RUP_CATALOG.dataset_types("D197"),
)

SPSE = DatasetFamily(
    name="spse",
    type_segment="4:4",
    catalog=SPSE_CATALOG,
    regions=("97",),
    dataset_types=SPSE_CATALOG.dataset_types("97"),
)

FAMILIES: Mapping[str, DatasetFamily] = MappingProxyType({
    RUP.name: RUP,
    SPSE.name: SPSE,
})


def get_family(name: str) -> DatasetFamily:
    """
    Resolve a family by name.

    Raises:
        ValueError: If the family is not known
    """
    try:
        return FAMILIES[name]
    except KeyError:
        raise ValueError(f"Unknown data family: {name}") from None
