# ABOUTME: Test parsing, column mapping and row validation for campaign target imports.
# ABOUTME: Import and edit mode must agree on which rows are skipped, reported or kept.

import json

from django.test import SimpleTestCase

from advocacy.constants import TARGET_FIELDS, TARGET_TEMPLATE_CSV
from advocacy.services.targets import (
    ColumnMapping,
    EditableTargetTable,
    RowIssue,
    TargetImport,
    TargetImportError,
    detect_delimiter,
    map_header_to_field,
    parse_delimited,
    rows_from_json,
    summarize_issues,
    validate_rows,
)


class HeaderMappingTests(SimpleTestCase):

    def test_common_header_spellings(self):
        self.assertEqual(map_header_to_field('Postal Code'), 'postal_code')
        self.assertEqual(map_header_to_field('PLZ'), 'postal_code')
        self.assertEqual(map_header_to_field('E-Mail'), 'email')
        self.assertEqual(map_header_to_field('\ufeffName'), 'name')
        self.assertEqual(map_header_to_field('lng'), 'longitude')
        self.assertIsNone(map_header_to_field('Notes'))

    def test_assigning_a_field_unassigns_other_columns(self):
        mapping = ColumnMapping(['name', None, 'email'])

        mapping.assign(1, 'name')

        self.assertEqual(mapping, [None, 'name', 'email'])
        self.assertEqual(mapping.index_of('name'), 1)

    def test_clearing_a_column(self):
        mapping = ColumnMapping(['name', 'email', 'postal_code'])

        mapping.assign(2, None)

        self.assertEqual(mapping.missing_required(), ['postal_code'])

    def test_unknown_field_or_column_is_rejected(self):
        mapping = ColumnMapping(['name'])

        with self.assertRaises(ValueError):
            mapping.assign(0, 'phone')
        with self.assertRaises(IndexError):
            mapping.assign(3, 'email')


class ParsingTests(SimpleTestCase):

    def test_detect_delimiter(self):
        self.assertEqual(detect_delimiter('\n\nname\temail\tplz\n'), '\t')
        self.assertEqual(detect_delimiter('name,email\tplz'), ',')
        self.assertEqual(detect_delimiter(''), ',')

    def test_quoted_cells_and_empty_lines(self):
        rows = parse_delimited('name,city\n"Doe, Jane",Berlin\n\n"Multi\nLine",Paris\n')

        self.assertEqual(rows, [['name', 'city'], ['Doe, Jane', 'Berlin'], ['Multi\nLine', 'Paris']])

    def test_json_rows_use_union_of_keys(self):
        text = json.dumps([
            {'name': 'A', 'email': 'a@example.org'},
            'not an object',
            {'name': 'B', 'postal_code': 10115, 'active': True, 'tags': ['x']},
        ])

        rows = rows_from_json(text)

        self.assertEqual(rows[0], ['name', 'email', 'postal_code', 'active', 'tags'])
        self.assertEqual(rows[1], ['A', 'a@example.org', '', '', ''])
        self.assertEqual(rows[2], ['B', '', '10115', 'true', '["x"]'])

    def test_json_errors(self):
        with self.assertRaisesMessage(TargetImportError, "Invalid JSON format."):
            rows_from_json('{nope')
        with self.assertRaisesMessage(TargetImportError, "JSON must be an array of objects."):
            rows_from_json('{"name": "A"}')
        self.assertEqual(rows_from_json('[1, 2]'), [])


class ValidateRowsTests(SimpleTestCase):

    def setUp(self):
        self.mapping = ['name', 'email', 'postal_code']

    def test_template_is_valid(self):
        target_import = TargetImport.from_file('template.csv', TARGET_TEMPLATE_CSV)

        validation = target_import.validation
        self.assertEqual(validation.issues, [])
        self.assertEqual(validation.valid_rows, 1)
        self.assertEqual(validation.targets[0]['latitude'], '52.5200')
        self.assertEqual(list(target_import.mapping), list(TARGET_FIELDS))
        self.assertTrue(target_import.can_save)

    def test_blank_rows_are_skipped_not_reported(self):
        rows = [
            ['name', 'email', 'postal_code'],
            ['A', 'a@example.org', '10115'],
            ['', '  ', ''],
            ['B', '', '10117'],
            ['C', 'not-an-email', '10119'],
        ]

        validation = validate_rows(rows, self.mapping)

        self.assertEqual(validation.total_rows, 4)
        self.assertEqual(validation.valid_rows, 1)
        self.assertEqual(validation.skipped_rows, 1)
        self.assertEqual(
            [str(issue) for issue in validation.issues],
            ['Row 4: Missing Email', 'Row 5: Invalid email format'],
        )
        self.assertFalse(validation.is_valid)

    def test_rows_without_header_are_numbered_from_one(self):
        validation = validate_rows([['A', '', '']], self.mapping, has_header=False)

        self.assertEqual(validation.issues, [RowIssue(row=1, messages=['Missing Email', 'Missing Postal Code'])])

    def test_values_are_trimmed_and_short_rows_tolerated(self):
        validation = validate_rows([['h1', 'h2', 'h3'], [' A ', ' a@example.org ', '10115 '], ['B']], self.mapping)

        self.assertEqual(validation.targets, [{'name': 'A', 'email': 'a@example.org', 'postal_code': '10115'}])
        self.assertEqual(len(validation.issues), 1)

    def test_missing_required_columns(self):
        validation = validate_rows([['name'], ['A']], ['name'])

        self.assertEqual(validation.missing_required_columns, ['email', 'postal_code'])
        self.assertFalse(validation.is_valid)

    def test_empty_table_is_not_valid(self):
        self.assertFalse(validate_rows([['name', 'email', 'postal_code']], self.mapping).is_valid)

    def test_summary_truncates(self):
        issues = [RowIssue(row=index, messages=['Missing Name']) for index in range(2, 12)]

        lines = summarize_issues(issues)

        self.assertEqual(len(lines), 9)
        self.assertEqual(lines[0], 'Row 2: Missing Name')
        self.assertEqual(lines[-1], '…and 2 more')


class TargetImportTests(SimpleTestCase):

    def test_tsv_file_from_bytes_with_bom(self):
        content = '\ufeffName\tE-mail address\tZIP\nA\ta@example.org\t10115\n'.encode('utf-8')

        target_import = TargetImport.from_file('targets.tsv', content)

        self.assertEqual(target_import.headers, ['Name', 'E-mail address', 'ZIP'])
        self.assertEqual(target_import.mapping, ['name', None, 'postal_code'])
        self.assertEqual(target_import.validation.missing_required_columns, ['email'])

        target_import.assign(1, 'email')
        self.assertTrue(target_import.can_save)

    def test_json_file(self):
        content = json.dumps([{'name': 'A', 'email': 'a@example.org', 'plz': '10115'}])

        target_import = TargetImport.from_file('targets.json', content)

        self.assertEqual(target_import.validation.targets[0]['postal_code'], '10115')

    def test_json_keys_stay_the_header(self):
        content = json.dumps([{'name': 'A', 'email': 'a@example.org', 'postal_code': '10115'}])
        target_import = TargetImport.from_file('targets.json', content)

        target_import.toggle_header(False)

        self.assertTrue(target_import.has_header)
        self.assertEqual(target_import.headers, ['name', 'email', 'postal_code'])
        self.assertEqual(target_import.validation.total_rows, 1)

    def test_empty_inputs(self):
        with self.assertRaisesMessage(TargetImportError, "No rows found in that file."):
            TargetImport.from_file('empty.csv', '\n\n')
        with self.assertRaisesMessage(TargetImportError, "Paste a table before parsing."):
            TargetImport.from_paste('   ')
        with self.assertRaisesMessage(TargetImportError, "Enter a Google Sheets URL."):
            TargetImport.from_google_sheet('')

    def test_toggle_header_rebuilds_mapping(self):
        target_import = TargetImport.from_paste('name\temail\tpostal_code\nA\ta@example.org\t10115')
        self.assertEqual(target_import.source_label, 'Pasted table')
        self.assertEqual(target_import.validation.total_rows, 1)

        target_import.toggle_header(False)

        self.assertEqual(target_import.headers, ['Column 1', 'Column 2', 'Column 3'])
        self.assertEqual(target_import.mapping, [None, None, None])
        self.assertEqual(target_import.validation.total_rows, 2)
        self.assertEqual(len(target_import.preview_rows()), 2)

    def test_blank_header_cells_get_placeholders(self):
        target_import = TargetImport.from_paste('name,,email\nA,x,a@example.org')

        self.assertEqual(target_import.headers, ['name', 'Column 2', 'email'])

    def test_to_editable_keeps_valid_rows_only(self):
        target_import = TargetImport.from_paste(
            'name,email,postal_code\nA,a@example.org,10115\nB,,10117\n'
        )

        table = target_import.to_editable()

        self.assertEqual(len(table), 1)
        self.assertEqual(table.rows[0]['name'], 'A')


class EditableTargetTableTests(SimpleTestCase):

    def test_rows_get_stable_ids(self):
        table = EditableTargetTable.from_targets([
            {'name': 'A', 'email': 'a@example.org', 'postal_code': '10115'},
            {'name': 'B', 'email': 'b@example.org', 'postal_code': '10117'},
        ])

        ids = [row['_id'] for row in table.rows]
        self.assertEqual(ids, ['row-1', 'row-2'])

        table.remove_row('row-1')
        new_id = table.add_row()

        self.assertEqual(new_id, 'row-3')
        self.assertEqual([row['_id'] for row in table.rows], ['row-2', 'row-3'])

    def test_edit_mode_uses_import_rules(self):
        table = EditableTargetTable()
        first = table.add_row({'name': 'A', 'email': 'a@example.org', 'postal_code': '10115'})
        table.add_row()
        third = table.add_row({'name': 'C', 'email': 'c@example', 'postal_code': '10119'})

        validation = table.validate()

        self.assertEqual(validation.skipped_rows, 1)
        self.assertEqual([str(issue) for issue in validation.issues], ['Row 3: Invalid email format'])
        self.assertFalse(table.can_save)

        table.update_cell(third, 'email', 'c@example.org')
        self.assertTrue(table.can_save)
        self.assertEqual(table.validate().valid_rows, 2)

        table.update_cell(first, 'city', 'Berlin')
        self.assertEqual(table.validate().targets[0]['city'], 'Berlin')

    def test_update_cell_errors(self):
        table = EditableTargetTable()
        row_id = table.add_row()

        with self.assertRaises(ValueError):
            table.update_cell(row_id, 'phone', '123')
        with self.assertRaises(KeyError):
            table.update_cell('row-99', 'name', 'X')
