# ABOUTME: Service layer for the advocacy application.
# ABOUTME: Re-exports the resolvers, importer, persistence and cache entry points.

from .directory import PartyExclusion, RepresentativeDirectory, exclude_parties
from .germany import GermanDataRepository, MdB, Wahlkreis, WahlkreisIndex
from .france import Depute, DeputeIndex, FrenchDataRepository
from .canada import MP, CanadianDataRepository, Riding, RidingIndex
from .uk import UKMP, ConstituencyIndex, UKDataRepository
from .us import CongressIndex, Representative, Senator, USDataRepository
from .jurisdiction import District, JurisdictionResolver, Resolution
from .represent_api_client import RepresentAPI
from .postcodes_io_client import PostcodesIO
from .canada_sync import CanadaDataFetcher
from .targets import (
    ColumnMapping,
    EditableTargetTable,
    TargetImport,
    TargetImportError,
    TargetValidation,
    validate_rows,
)
from .google_sheets import fetch_google_sheet_csv, parse_google_sheet_url
from .target_store import TargetSaveError, replace_campaign_targets
from .letter_cache import BestEffortStore, LetterCache, adapt_letter_for_representative

__all__ = [
    'PartyExclusion',
    'RepresentativeDirectory',
    'exclude_parties',
    'GermanDataRepository',
    'MdB',
    'Wahlkreis',
    'WahlkreisIndex',
    'Depute',
    'DeputeIndex',
    'FrenchDataRepository',
    'MP',
    'CanadianDataRepository',
    'Riding',
    'RidingIndex',
    'UKMP',
    'ConstituencyIndex',
    'UKDataRepository',
    'CongressIndex',
    'Representative',
    'Senator',
    'USDataRepository',
    'District',
    'JurisdictionResolver',
    'Resolution',
    'RepresentAPI',
    'PostcodesIO',
    'CanadaDataFetcher',
    'ColumnMapping',
    'EditableTargetTable',
    'TargetImport',
    'TargetImportError',
    'TargetValidation',
    'validate_rows',
    'fetch_google_sheet_csv',
    'parse_google_sheet_url',
    'TargetSaveError',
    'replace_campaign_targets',
    'BestEffortStore',
    'LetterCache',
    'adapt_letter_for_representative',
]
