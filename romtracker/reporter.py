"""
Missing release report generation and export.
"""

import csv
import json
from typing import Dict, Iterable, List, Optional

from .models import MatchResult
from .regions import sanitize_region


def format_size(size_bytes: int) -> str:
    """Human-readable size, e.g. "1.5 MB"."""
    size = float(size_bytes or 0)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            if unit == 'B':
                return f"{int(size)} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


class MissingReporter:
    """Builds missing-release reports from match results."""

    def generate_report(self, platform_name: str, results: Iterable[MatchResult]) -> Dict:
        """Missing report for one platform's results."""
        results = [r for r in results if r.platform_name == platform_name]
        missing = []
        for r in results:
            if r.owned:
                continue
            entry = r.entry
            missing.append({
                'name': entry.match_name,
                'reference_name': entry.reference_name,
                'description': entry.description,
                'region': entry.region or '',
                'category': entry.category.value,
                'size': entry.size,
                'size_formatted': format_size(entry.size),
                'crc32': entry.crc32.upper(),
                'md5': entry.md5.upper(),
                'sha1': entry.sha1.upper(),
                'owned_in_other_region': any(a.owned for a in r.alternate_regions or ()),
            })

        total = len(results)
        owned = total - len(missing)
        percentage = (owned / total * 100) if total > 0 else 0

        regions: Dict[str, int] = {}
        for m in missing:
            region = sanitize_region(m['region']) or m['region'] or 'Unknown'
            regions[region] = regions.get(region, 0) + 1

        return {
            'platform_name': platform_name,
            'total': total,
            'owned': owned,
            'missing_count': len(missing),
            'percentage': percentage,
            'missing_by_region': regions,
            'missing': missing,
        }

    def generate_multi_report(self, results: Iterable[MatchResult],
                              platforms: Optional[List[str]] = None) -> Dict:
        """Combined report, one section per platform in first-seen order."""
        results = list(results)
        if platforms is None:
            platforms = list(dict.fromkeys(r.platform_name for r in results))
        reports = {p: self.generate_report(p, results) for p in platforms}

        total = sum(r['total'] for r in reports.values())
        owned = sum(r['owned'] for r in reports.values())
        missing = sum(r['missing_count'] for r in reports.values())

        return {
            'total_platforms': len(reports),
            'total': total,
            'owned': owned,
            'missing_count': missing,
            'overall_percentage': (owned / total * 100) if total > 0 else 0,
            'by_platform': reports,
        }

    def export(self, report: Dict, filepath: str, fmt: str = 'txt') -> None:
        exporters = {
            'txt': self.export_txt,
            'csv': self.export_csv,
            'json': self.export_json,
        }
        if fmt not in exporters:
            raise ValueError(f"Unknown report format: {fmt}")
        exporters[fmt](report, filepath)

    def render_txt(self, report: Dict) -> str:
        lines: List[str] = []
        if 'by_platform' in report:
            lines.append("=== Collection Missing Report ===")
            lines.append("")
            lines.append(f"Platforms: {report['total_platforms']}")
            lines.append(f"Overall: {report['owned']}/{report['total']} "
                         f"({report['overall_percentage']:.1f}%)")
            lines.append(f"Missing: {report['missing_count']}")
            lines.append("")
            for platform_report in report['by_platform'].values():
                lines.extend(self._platform_lines(platform_report))
        else:
            lines.extend(self._platform_lines(report))
        return "\n".join(lines) + "\n"

    def _platform_lines(self, report: Dict) -> List[str]:
        lines = [
            f"--- {report['platform_name']} ---",
            f"Owned: {report['owned']}/{report['total']} ({report['percentage']:.1f}%)",
            f"Missing: {report['missing_count']}",
        ]
        if report['missing_by_region']:
            lines.append("Missing by region:")
            for region, count in sorted(report['missing_by_region'].items()):
                lines.append(f"  {region}: {count}")
        lines.append("")
        lines.append("Missing:")
        for m in report['missing']:
            region = f" [{m['region']}]" if m['region'] else ""
            lines.append(f"  {m['name']}{region}")
        lines.append("")
        return lines

    def export_txt(self, report: Dict, filepath: str) -> None:
        """Export report as plain text."""
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(self.render_txt(report))

    def export_csv(self, report: Dict, filepath: str) -> None:
        """Export report as CSV."""
        if 'by_platform' in report:
            sections = list(report['by_platform'].values())
        else:
            sections = [report]

        with open(filepath, 'w', encoding='utf-8', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['Platform', 'Name', 'Description', 'Region', 'Category',
                             'Size', 'CRC32', 'MD5', 'SHA1'])
            for section in sections:
                for m in section['missing']:
                    writer.writerow([
                        section['platform_name'],
                        m['name'], m['description'], m['region'], m['category'],
                        m['size'], m['crc32'], m['md5'], m['sha1'],
                    ])

    def export_json(self, report: Dict, filepath: str) -> None:
        """Export report as JSON."""
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
