"""
Migration Script: JSON export to database
Imports portfolio content from a JSON export through the CRUD services, so
every row passes the same validation as the admin API.

Usage:
    python migrations/import_content.py export.json

The export maps entity names to lists of rows, e.g.
``{"projects": [...], "experiences": [...], "content": [...]}``.
"""

import json
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.crud import SERVICES, site_content
from utils.errors import Conflict, ValidationError


# Import order: languages must exist before their translations
IMPORT_ORDER = (
    ('languages', 'languages'),
    ('translations', 'translations'),
    ('projects', 'projects'),
    ('experiences', 'experiences'),
    ('testimonials', 'testimonials'),
    ('skills', 'skills'),
    ('socialProfiles', 'social-profiles'),
    ('blogPosts', 'blog/posts'),
)


def import_rows(service, rows):
    """Create each row; invalid or duplicate rows are reported and skipped"""
    created, skipped = 0, []
    for index, row in enumerate(rows):
        try:
            service.create(row)
            created += 1
        except (ValidationError, Conflict) as e:
            details = getattr(e, 'errors', None) or e.message
            skipped.append({'index': index, 'error': details})
    return created, skipped


def import_content(data):
    """
    Import every known entity found in ``data``.

    Args:
        data (dict): Parsed JSON export

    Returns:
        dict: {entity: {'created': int, 'skipped': [...]}}
    """
    report = {}
    for key, segment in IMPORT_ORDER:
        rows = data.get(key) or data.get(segment) or []
        if rows:
            created, skipped = import_rows(SERVICES[segment], rows)
            report[key] = {'created': created, 'skipped': skipped}

    content_rows = data.get('content') or []
    if content_rows:
        saved, skipped = 0, []
        for index, row in enumerate(content_rows):
            try:
                site_content.upsert(row)
                saved += 1
            except (ValidationError, Conflict) as e:
                skipped.append({'index': index, 'error': getattr(e, 'errors', None) or e.message})
        report['content'] = {'created': saved, 'skipped': skipped}
    return report


def main(argv=None):
    """Main migration function"""
    from app import create_app

    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: python migrations/import_content.py <export.json>")
        return 1

    json_file = argv[0]
    if not os.path.exists(json_file):
        print(f"Error: {json_file} not found!")
        return 1

    print("=" * 60)
    print("Content Import Script")
    print("=" * 60)

    with open(json_file, 'r', encoding='utf-8') as f:
        data = json.load(f)

    app = create_app()
    with app.app_context():
        report = import_content(data)

    for entity, result in report.items():
        print(f"[OK] {entity}: {result['created']} imported, {len(result['skipped'])} skipped")
        for skipped in result['skipped']:
            print(f"     row {skipped['index']}: {skipped['error']}")

    print("=" * 60)
    print("Import completed")
    return 0


if __name__ == '__main__':
    sys.exit(main())
