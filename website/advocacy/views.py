import json
import logging
from dataclasses import asdict, is_dataclass

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from .constants import (
    REQUIRED_TARGET_FIELDS,
    SUPPORTED_COUNTRIES,
    TARGET_FIELD_HELP,
    TARGET_FIELD_LABELS,
    TARGET_FIELDS,
    TARGET_TEMPLATE_CSV,
)
from .forms import CachedLetterForm, PostalCodeLookupForm, TargetImportForm
from .models import Campaign
from .services import (
    EditableTargetTable,
    JurisdictionResolver,
    LetterCache,
    TargetImportError,
    TargetSaveError,
    adapt_letter_for_representative,
    fetch_google_sheet_csv,
    replace_campaign_targets,
)

logger = logging.getLogger(__name__)


def _json_body(request):
    try:
        payload = json.loads(request.body or b'{}')
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _serialize(representative):
    return asdict(representative) if is_dataclass(representative) else representative


def _form_errors(form):
    return {field: [str(error) for error in errors] for field, errors in form.errors.items()}


def _forbidden_unless_staff(request):
    if not request.user.is_staff:
        return JsonResponse({'error': 'Only campaign staff can manage targets.'}, status=403)
    return None


def _target_fields():
    return [
        {
            'name': name,
            'label': TARGET_FIELD_LABELS[name],
            'help': TARGET_FIELD_HELP[name],
            'required': name in REQUIRED_TARGET_FIELDS,
        }
        for name in TARGET_FIELDS
    ]


# Jurisdiction lookup

@require_GET
def lookup_postal_code(request, country):
    """Resolve a postal code to districts and representatives."""
    country = country.upper()
    if country not in SUPPORTED_COUNTRIES:
        return JsonResponse({'error': f'Unsupported country: {country}'}, status=404)

    form = PostalCodeLookupForm(request.GET)
    if not form.is_valid():
        return JsonResponse({'error': 'Enter a postal code.', 'errors': _form_errors(form)}, status=400)

    resolution = JurisdictionResolver().resolve(form.cleaned_data['postal_code'], country)
    payload = resolution.to_dict()
    payload['found'] = resolution.found
    return JsonResponse(payload)


# Target import

@require_GET
def target_template_csv(request):
    """Downloadable example table with every supported column."""
    response = HttpResponse(TARGET_TEMPLATE_CSV, content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = 'attachment; filename="campaign-targets-template.csv"'
    return response


@login_required
@require_http_methods(["POST"])
def google_sheet_csv(request):
    """Return the CSV export of a publicly shared Google Sheet."""
    payload = _json_body(request)
    if payload is None:
        return JsonResponse({'error': 'Invalid request payload.'}, status=400)

    try:
        csv_text = fetch_google_sheet_csv(payload.get('url') or '')
    except TargetImportError as exc:
        return JsonResponse({'error': exc.message}, status=exc.status_code)
    return JsonResponse({'csv': csv_text})


@login_required
@require_http_methods(["POST"])
def campaign_targets_preview(request, slug):
    """Parse and validate an uploaded target table without saving it."""
    denied = _forbidden_unless_staff(request)
    if denied:
        return denied
    campaign = get_object_or_404(Campaign, slug=slug)

    form = TargetImportForm(request.POST, request.FILES)
    if not form.is_valid():
        return JsonResponse({'error': 'Invalid import request.', 'errors': _form_errors(form)}, status=400)

    try:
        target_import = form.build_import()
    except TargetImportError as exc:
        return JsonResponse({'error': exc.message}, status=exc.status_code)

    validation = target_import.validation
    logger.info(
        "Previewed %s rows for campaign %s: %s valid, %s issues",
        validation.total_rows, campaign.slug, validation.valid_rows, len(validation.issues),
    )
    return JsonResponse({
        'campaign': campaign.slug,
        'source': target_import.source_label,
        'has_header': target_import.has_header,
        'headers': target_import.headers,
        'mapping': target_import.mapping.as_list(),
        'fields': _target_fields(),
        'preview': target_import.preview_rows(),
        'validation': validation.to_dict(),
        'can_save': validation.is_valid,
    })


@login_required
@require_http_methods(["POST"])
def campaign_targets_save(request, slug):
    """
    Replace a campaign's targets.

    Accepts either the same form as the preview endpoint or a JSON body
    ``{"targets": [...]}`` coming from the row editor.
    """
    denied = _forbidden_unless_staff(request)
    if denied:
        return denied
    campaign = get_object_or_404(Campaign, slug=slug)

    if request.content_type == 'application/json':
        payload = _json_body(request)
        if payload is None or not isinstance(payload.get('targets'), list):
            return JsonResponse({'error': 'Invalid request payload.'}, status=400)
        rows = [row for row in payload['targets'] if isinstance(row, dict)]
        validation = EditableTargetTable.from_targets(rows).validate()
    else:
        form = TargetImportForm(request.POST, request.FILES)
        if not form.is_valid():
            return JsonResponse({'error': 'Invalid import request.', 'errors': _form_errors(form)}, status=400)
        try:
            validation = form.build_import().validation
        except TargetImportError as exc:
            return JsonResponse({'error': exc.message}, status=exc.status_code)

    if not validation.is_valid:
        return JsonResponse(
            {'error': 'Fix the listed rows before saving.', 'validation': validation.to_dict()},
            status=400,
        )

    try:
        created = replace_campaign_targets(campaign, validation.targets)
    except TargetSaveError as exc:
        return JsonResponse({'error': str(exc)}, status=500)

    return JsonResponse({'campaign': campaign.slug, 'saved': len(created)})


# Letter cache

@require_http_methods(["GET", "POST", "DELETE"])
def letter_cache(request):
    """Read, store or clear the visitor's cached letter."""
    cache = LetterCache(request.session)

    if request.method == 'DELETE':
        cache.clear_cached_letter()
        return JsonResponse({'cleared': True})

    if request.method == 'POST':
        payload = _json_body(request) if request.content_type == 'application/json' else request.POST
        form = CachedLetterForm(payload or {})
        if not form.is_valid():
            return JsonResponse({'error': 'Invalid letter.', 'errors': _form_errors(form)}, status=400)
        letter = form.to_letter()
        cached = cache.cache_letter(letter)
        cache.add_to_history({
            'content': letter['content'],
            'subject': letter['subject'],
            'word_count': letter['word_count'],
            'representative_name': letter['representative']['name'],
            'representative_party': letter['representative']['party'],
            'district_name': letter['district_name'],
        })
        return JsonResponse({'letter': cached}, status=201)

    return JsonResponse({
        'letter': cache.get_cached_letter(),
        'emailed': cache.get_emailed(),
        'stats': cache.get_stats(),
    })


@require_http_methods(["POST", "DELETE"])
def letter_cache_emailed(request):
    """Record that the cached letter was sent to a representative."""
    cache = LetterCache(request.session)

    if request.method == 'DELETE':
        cache.clear_emailed()
        return JsonResponse({'emailed': []})

    payload = _json_body(request)
    if payload is None or not payload.get('id'):
        return JsonResponse({'error': 'Invalid request payload.'}, status=400)

    cache.mark_emailed({
        'id': str(payload['id']),
        'name': payload.get('name', ''),
        'party': payload.get('party', ''),
    })
    cache.touch_cached_letter()
    return JsonResponse({'emailed': cache.get_emailed()})


@require_GET
def letter_cache_remaining(request, country, district_id):
    """Representatives of the district that have not been emailed yet."""
    country = country.upper()
    if country not in SUPPORTED_COUNTRIES:
        return JsonResponse({'error': f'Unsupported country: {country}'}, status=404)

    cache = LetterCache(request.session)
    representatives = JurisdictionResolver().representatives_for_district(country, district_id)
    remaining = cache.remaining_representatives(representatives)

    letter = cache.get_cached_letter()
    adapted = []
    for representative in remaining:
        entry = _serialize(representative)
        if letter and request.GET.get('adapt'):
            entry['adapted_content'] = adapt_letter_for_representative(
                letter.get('content', ''),
                (letter.get('representative') or {}).get('name', ''),
                entry.get('name', ''),
            )
        adapted.append(entry)

    return JsonResponse({
        'country': country,
        'district_id': district_id,
        'remaining': adapted,
        'total': len(representatives),
    })
