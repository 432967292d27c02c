"""Static constants and helpers for postal-code and party normalization."""

from __future__ import annotations

from typing import Dict, Optional

GERMAN_STATE_ALIASES = {
    'Baden-Württemberg': ['Baden-Württemberg', 'BW'],
    'Bayern': ['Bayern', 'Bavaria', 'BY'],
    'Berlin': ['Berlin', 'BE'],
    'Brandenburg': ['Brandenburg', 'BB'],
    'Bremen': ['Bremen', 'HB'],
    'Hamburg': ['Hamburg', 'HH'],
    'Hessen': ['Hessen', 'Hesse', 'HE'],
    'Mecklenburg-Vorpommern': ['Mecklenburg-Vorpommern', 'MV'],
    'Niedersachsen': ['Niedersachsen', 'Lower Saxony', 'NI'],
    'Nordrhein-Westfalen': ['Nordrhein-Westfalen', 'North Rhine-Westphalia', 'NRW', 'NW'],
    'Rheinland-Pfalz': ['Rheinland-Pfalz', 'Rhineland-Palatinate', 'RP'],
    'Saarland': ['Saarland', 'SL'],
    'Sachsen': ['Sachsen', 'Saxony', 'SN'],
    'Sachsen-Anhalt': ['Sachsen-Anhalt', 'Saxony-Anhalt', 'ST'],
    'Schleswig-Holstein': ['Schleswig-Holstein', 'SH'],
    'Thüringen': ['Thüringen', 'Thuringia', 'TH'],
}

FRENCH_DEPARTMENTS: Dict[str, str] = {
    '01': 'Ain',
    '02': 'Aisne',
    '03': 'Allier',
    '04': 'Alpes-de-Haute-Provence',
    '05': 'Hautes-Alpes',
    '06': 'Alpes-Maritimes',
    '07': 'Ardèche',
    '08': 'Ardennes',
    '09': 'Ariège',
    '10': 'Aube',
    '11': 'Aude',
    '12': 'Aveyron',
    '13': 'Bouches-du-Rhône',
    '14': 'Calvados',
    '15': 'Cantal',
    '16': 'Charente',
    '17': 'Charente-Maritime',
    '18': 'Cher',
    '19': 'Corrèze',
    '21': "Côte-d'Or",
    '22': "Côtes-d'Armor",
    '23': 'Creuse',
    '24': 'Dordogne',
    '25': 'Doubs',
    '26': 'Drôme',
    '27': 'Eure',
    '28': 'Eure-et-Loir',
    '29': 'Finistère',
    '2A': 'Corse-du-Sud',
    '2B': 'Haute-Corse',
    '30': 'Gard',
    '31': 'Haute-Garonne',
    '32': 'Gers',
    '33': 'Gironde',
    '34': 'Hérault',
    '35': 'Ille-et-Vilaine',
    '36': 'Indre',
    '37': 'Indre-et-Loire',
    '38': 'Isère',
    '39': 'Jura',
    '40': 'Landes',
    '41': 'Loir-et-Cher',
    '42': 'Loire',
    '43': 'Haute-Loire',
    '44': 'Loire-Atlantique',
    '45': 'Loiret',
    '46': 'Lot',
    '47': 'Lot-et-Garonne',
    '48': 'Lozère',
    '49': 'Maine-et-Loire',
    '50': 'Manche',
    '51': 'Marne',
    '52': 'Haute-Marne',
    '53': 'Mayenne',
    '54': 'Meurthe-et-Moselle',
    '55': 'Meuse',
    '56': 'Morbihan',
    '57': 'Moselle',
    '58': 'Nièvre',
    '59': 'Nord',
    '60': 'Oise',
    '61': 'Orne',
    '62': 'Pas-de-Calais',
    '63': 'Puy-de-Dôme',
    '64': 'Pyrénées-Atlantiques',
    '65': 'Hautes-Pyrénées',
    '66': 'Pyrénées-Orientales',
    '67': 'Bas-Rhin',
    '68': 'Haut-Rhin',
    '69': 'Rhône',
    '70': 'Haute-Saône',
    '71': 'Saône-et-Loire',
    '72': 'Sarthe',
    '73': 'Savoie',
    '74': 'Haute-Savoie',
    '75': 'Paris',
    '76': 'Seine-Maritime',
    '77': 'Seine-et-Marne',
    '78': 'Yvelines',
    '79': 'Deux-Sèvres',
    '80': 'Somme',
    '81': 'Tarn',
    '82': 'Tarn-et-Garonne',
    '83': 'Var',
    '84': 'Vaucluse',
    '85': 'Vendée',
    '86': 'Vienne',
    '87': 'Haute-Vienne',
    '88': 'Vosges',
    '89': 'Yonne',
    '90': 'Territoire de Belfort',
    '91': 'Essonne',
    '92': 'Hauts-de-Seine',
    '93': 'Seine-Saint-Denis',
    '94': 'Val-de-Marne',
    '95': "Val-d'Oise",
    # Overseas departments
    '971': 'Guadeloupe',
    '972': 'Martinique',
    '973': 'Guyane',
    '974': 'La Réunion',
    '976': 'Mayotte',
    # Overseas collectivities (own constituencies, no postal-code derivation)
    '975': 'Saint-Pierre-et-Miquelon',
    '977': 'Saint-Barthélemy & Saint-Martin',
    '986': 'Wallis-et-Futuna',
    '987': 'Polynésie française',
    '988': 'Nouvelle-Calédonie',
    # French residents abroad
    'FE1': 'Europe du Nord',
    'FE2': 'Péninsule ibérique',
    'FE3': 'Europe centrale & du Sud',
    'FE4': "Europe de l'Est",
    'FE5': "Afrique du Nord & de l'Ouest",
    'FE6': 'Afrique & Moyen-Orient',
    'FE7': 'Asie & Océanie',
    'FE8': 'Amérique du Nord',
    'FE9': 'Amérique latine Nord',
    'FE10': 'Amérique latine Sud',
    'FE11': 'Asie centrale & Inde',
}

FRENCH_OVERSEAS_DEPARTMENTS = ('971', '972', '973', '974', '976')

# 20000-20199 is Corse-du-Sud, everything from 20200 on is Haute-Corse.
CORSICA_SPLIT_POSTAL_CODE = 20200

CANADIAN_PROVINCE_CODES: Dict[str, str] = {
    '10': 'Newfoundland and Labrador',
    '11': 'Prince Edward Island',
    '12': 'Nova Scotia',
    '13': 'New Brunswick',
    '24': 'Quebec',
    '35': 'Ontario',
    '46': 'Manitoba',
    '47': 'Saskatchewan',
    '48': 'Alberta',
    '59': 'British Columbia',
    '60': 'Yukon',
    '61': 'Northwest Territories',
    '62': 'Nunavut',
}

CANADIAN_PARTY_ALIASES = {
    'liberal': 'Liberal',
    'liberal party of canada': 'Liberal',
    'conservative': 'Conservative',
    'conservative party of canada': 'Conservative',
    'ndp': 'NDP',
    'new democratic party': 'NDP',
    'bloc québécois': 'Bloc Québécois',
    'green party': 'Green',
    'green party of canada': 'Green',
    'independent': 'Independent',
}

US_STATE_NAMES = {
    'AL': 'Alabama',
    'AK': 'Alaska',
    'AZ': 'Arizona',
    'AR': 'Arkansas',
    'CA': 'California',
    'CO': 'Colorado',
    'CT': 'Connecticut',
    'DE': 'Delaware',
    'FL': 'Florida',
    'GA': 'Georgia',
    'HI': 'Hawaii',
    'ID': 'Idaho',
    'IL': 'Illinois',
    'IN': 'Indiana',
    'IA': 'Iowa',
    'KS': 'Kansas',
    'KY': 'Kentucky',
    'LA': 'Louisiana',
    'ME': 'Maine',
    'MD': 'Maryland',
    'MA': 'Massachusetts',
    'MI': 'Michigan',
    'MN': 'Minnesota',
    'MS': 'Mississippi',
    'MO': 'Missouri',
    'MT': 'Montana',
    'NE': 'Nebraska',
    'NV': 'Nevada',
    'NH': 'New Hampshire',
    'NJ': 'New Jersey',
    'NM': 'New Mexico',
    'NY': 'New York',
    'NC': 'North Carolina',
    'ND': 'North Dakota',
    'OH': 'Ohio',
    'OK': 'Oklahoma',
    'OR': 'Oregon',
    'PA': 'Pennsylvania',
    'RI': 'Rhode Island',
    'SC': 'South Carolina',
    'SD': 'South Dakota',
    'TN': 'Tennessee',
    'TX': 'Texas',
    'UT': 'Utah',
    'VT': 'Vermont',
    'VA': 'Virginia',
    'WA': 'Washington',
    'WV': 'West Virginia',
    'WI': 'Wisconsin',
    'WY': 'Wyoming',
    'DC': 'District of Columbia',
    'PR': 'Puerto Rico',
    'GU': 'Guam',
    'VI': 'Virgin Islands',
    'AS': 'American Samoa',
    'MP': 'Northern Mariana Islands',
}

SUPPORTED_COUNTRIES = ('DE', 'FR', 'CA', 'UK', 'US')

# Campaign target schema, in template column order
TARGET_FIELDS = (
    'name',
    'email',
    'postal_code',
    'city',
    'region',
    'country_code',
    'category',
    'image_url',
    'latitude',
    'longitude',
)

REQUIRED_TARGET_FIELDS = ('name', 'email', 'postal_code')

TARGET_FIELD_LABELS: Dict[str, str] = {
    'name': 'Name',
    'email': 'Email',
    'postal_code': 'Postal Code',
    'city': 'City',
    'region': 'Region',
    'country_code': 'Country Code',
    'category': 'Category',
    'image_url': 'Image URL',
    'latitude': 'Latitude',
    'longitude': 'Longitude',
}

TARGET_FIELD_HELP: Dict[str, str] = {
    'name': 'Target name (required)',
    'email': 'Contact email (required)',
    'postal_code': 'Postal code (required)',
    'city': 'City name',
    'region': 'State or province',
    'country_code': 'Two-letter country code',
    'category': 'Optional label like University or NGO',
    'image_url': 'Logo or image URL',
    'latitude': 'Decimal degrees',
    'longitude': 'Decimal degrees',
}

TARGET_TEMPLATE_CSV = (
    'name,email,postal_code,city,region,country_code,category,image_url,latitude,longitude\n'
    'Example University,info@example.edu,10115,Berlin,Berlin,DE,University,'
    'https://example.edu/logo.png,52.5200,13.4050\n'
)

# Normalized header → target field
TARGET_HEADER_ALIASES: Dict[str, str] = {
    'name': 'name',
    'email': 'email',
    'postalcode': 'postal_code',
    'postal_code': 'postal_code',
    'postcode': 'postal_code',
    'post_code': 'postal_code',
    'plz': 'postal_code',
    'zip': 'postal_code',
    'city': 'city',
    'region': 'region',
    'state': 'region',
    'country': 'country_code',
    'countrycode': 'country_code',
    'country_code': 'country_code',
    'category': 'category',
    'type': 'category',
    'image': 'image_url',
    'imageurl': 'image_url',
    'image_url': 'image_url',
    'latitude': 'latitude',
    'lat': 'latitude',
    'longitude': 'longitude',
    'lng': 'longitude',
    'lon': 'longitude',
}


def normalize_german_state(state: Optional[str]) -> Optional[str]:
    """Return canonical German state name if known."""
    if not state:
        return None

    state_clean = state.strip()
    if not state_clean:
        return None

    lower_value = state_clean.lower()

    for canonical, variants in GERMAN_STATE_ALIASES.items():
        if lower_value == canonical.lower():
            return canonical
        for variant in variants:
            if lower_value == variant.lower():
                return canonical

    return state_clean


def normalize_canadian_party(party: Optional[str]) -> Optional[str]:
    """Return canonical Canadian party label when known."""
    if not party:
        return party

    cleaned = party.strip()
    if not cleaned:
        return cleaned

    canonical = CANADIAN_PARTY_ALIASES.get(cleaned.lower())
    return canonical or cleaned


def province_from_riding_id(riding_id: Optional[str]) -> str:
    """Derive the province name from the first two digits of a federal riding id."""
    if not riding_id:
        return ''
    return CANADIAN_PROVINCE_CODES.get(str(riding_id)[:2], '')
