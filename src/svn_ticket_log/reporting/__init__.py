"""결과 출력 패키지"""

from .report_writer import OUTPUT_FORMATS, ReportWriter, write_output

__all__ = [
    'OUTPUT_FORMATS',
    'ReportWriter',
    'write_output',
]
