"""
Submission client for the judge.

Usage:
    python -m judgeserver.client <problem_id> <program_file> [--url <judge_url>]

If ``--url`` is omitted, ``JUDGE_URL`` is used, and then the local server address from settings.
"""
import argparse
import os
import sys
from pathlib import Path

import requests

import settings


def submit(url: str, problem_id: str, program: Path, timeout: float = 300) -> dict:
    """Uploads a program to the judge and returns the decoded report."""
    with open(program, mode='rb') as f:
        response = requests.post(f'{url.rstrip("/")}/judge',
                                 data={'problemId': problem_id},
                                 files={'code': (program.name, f, 'text/x-python')},
                                 timeout=timeout)
    if response.status_code != 200:
        try:
            detail = response.json().get('detail', response.text)
        except ValueError:
            detail = response.text
        raise ConnectionError(f'Judge rejected the submission. Status code: {response.status_code} ({detail})')
    return response.json()


def format_report(report: dict) -> str:
    lines = []
    for idx, result in enumerate(report['results'], 1):
        status = 'OK' if result['passed'] else result.get('verdict', 'failed').upper()
        lines.append(f'#{idx} [{result["testCaseId"]}] {status}')
        if not result['passed']:
            if 'error' in result:
                lines.append('    ' + result['error'].strip().replace('\n', '\n    '))
            else:
                lines.append(f'    expected: {result.get("expectedOutput")!r}')
                lines.append(f'    actual:   {result.get("actualOutput")!r}')
    lines.append(f'Score: {report["score"]}')
    return '\n'.join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description='Submit a program to the judge.')
    parser.add_argument('problem_id')
    parser.add_argument('program', type=Path)
    parser.add_argument('--url', default=os.getenv('JUDGE_URL',
                                                   f'http://{settings.SERVER_HOST}:{settings.SERVER_PORT}'))
    args = parser.parse_args(argv)

    if not args.program.is_file():
        print(f'No such file: {args.program}', file=sys.stderr)
        return 2

    try:
        report = submit(args.url, args.problem_id, args.program)
    except (requests.RequestException, ConnectionError) as e:
        print(str(e), file=sys.stderr)
        return 2

    print(format_report(report))
    return 0 if report['totalCount'] > 0 and report['passedCount'] == report['totalCount'] else 1


if __name__ == '__main__':
    sys.exit(main())
