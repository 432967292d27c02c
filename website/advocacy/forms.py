import json

from django import forms
from django.utils.translation import gettext_lazy as _

from .constants import SUPPORTED_COUNTRIES, TARGET_FIELDS
from .services.targets import TargetImport, TargetImportError


class PostalCodeLookupForm(forms.Form):
    """Postal code entered by a letter writer."""
    postal_code = forms.CharField(max_length=20, label=_('Postal code'))

    def clean_postal_code(self):
        return self.cleaned_data['postal_code'].strip()


class TargetImportForm(forms.Form):
    """
    One target table from exactly one source: an uploaded file, pasted text
    or a public Google Sheet. ``mapping`` optionally overrides the automatic
    column mapping with a JSON list of field names (null for unmapped).
    """

    file = forms.FileField(required=False, label=_('CSV, TSV or JSON file'))
    text = forms.CharField(required=False, widget=forms.Textarea, label=_('Pasted table'))
    google_sheet_url = forms.CharField(required=False, max_length=500, label=_('Google Sheets URL'))
    has_header = forms.BooleanField(required=False, initial=True, label=_('First row contains headers'))
    mapping = forms.CharField(required=False, widget=forms.HiddenInput)

    def clean_mapping(self):
        raw = self.cleaned_data.get('mapping')
        if not raw:
            return None
        try:
            mapping = json.loads(raw)
        except ValueError:
            raise forms.ValidationError(_('Column mapping must be a JSON list.'))
        if not isinstance(mapping, list) or any(
            value is not None and value not in TARGET_FIELDS for value in mapping
        ):
            raise forms.ValidationError(_('Column mapping must be a JSON list.'))
        return mapping

    def clean(self):
        cleaned_data = super().clean()
        sources = [
            name for name in ('file', 'text', 'google_sheet_url')
            if cleaned_data.get(name)
        ]
        if len(sources) != 1:
            raise forms.ValidationError(_('Provide exactly one of a file, a pasted table or a Google Sheets URL.'))
        return cleaned_data

    def file_has_header(self) -> bool:
        # Files and sheets start with a header row unless the client says otherwise
        if 'has_header' not in self.data:
            return True
        return bool(self.cleaned_data.get('has_header'))

    def build_import(self) -> TargetImport:
        """Parse the submitted source; raises ``TargetImportError`` on unreadable input."""
        data = self.cleaned_data
        if data.get('file'):
            upload = data['file']
            target_import = TargetImport.from_file(upload.name, upload.read())
            target_import.toggle_header(self.file_has_header())
        elif data.get('text'):
            target_import = TargetImport.from_paste(data['text'], has_header=bool(data.get('has_header')))
        else:
            target_import = TargetImport.from_google_sheet(data['google_sheet_url'])
            target_import.toggle_header(self.file_has_header())

        mapping = data.get('mapping')
        if mapping is not None:
            if len(mapping) != len(target_import.mapping):
                raise TargetImportError("Column mapping does not match the table.")
            for index, target_field in enumerate(mapping):
                target_import.assign(index, target_field)
        return target_import


class CachedLetterForm(forms.Form):
    """A generated letter, kept so it can be re-sent to other representatives."""

    content = forms.CharField(widget=forms.Textarea)
    subject = forms.CharField(max_length=255)
    representative_id = forms.CharField(max_length=50)
    representative_name = forms.CharField(max_length=255)
    representative_party = forms.CharField(max_length=100, required=False)
    country = forms.ChoiceField(choices=[(code, code) for code in SUPPORTED_COUNTRIES])
    district_id = forms.CharField(max_length=255)
    district_name = forms.CharField(max_length=255, required=False)
    sender_name = forms.CharField(max_length=255, required=False)
    sender_postal_code = forms.CharField(max_length=20, required=False)
    personal_note = forms.CharField(widget=forms.Textarea, required=False)

    def to_letter(self) -> dict:
        data = self.cleaned_data
        return {
            'content': data['content'],
            'subject': data['subject'],
            'word_count': len(data['content'].split()),
            'country': data['country'],
            'district_id': data['district_id'],
            'district_name': data['district_name'],
            'sender_name': data['sender_name'],
            'sender_postal_code': data['sender_postal_code'],
            'personal_note': data['personal_note'],
            'representative': {
                'id': data['representative_id'],
                'name': data['representative_name'],
                'party': data['representative_party'],
            },
        }
