"""
Apply elderly mode to a saved HTML page and print the result.

Usage:
	python -m elderly_mode page.html --url https://www.example.com/ [--engine selectors] [--sync-mode clone] [-o out.html]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from elderly_mode.config import EngineGeneration, EngineSettings, SyncMode
from elderly_mode.dom.page import LivePage
from elderly_mode.logging_config import setup_logging
from elderly_mode.rules.service import RulesService
from elderly_mode.session.service import ElderlyModeSession

logger = logging.getLogger('elderly_mode.cli')


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog='elderly-mode', description='Re-layout an HTML page for older readers')
	parser.add_argument('html_file', type=Path, help='HTML file to transform')
	parser.add_argument('--url', default='about:blank', help='URL the page was saved from (selects site rules)')
	parser.add_argument('--engine', choices=[engine.value for engine in EngineGeneration], default=None)
	parser.add_argument('--sync-mode', choices=[mode.value for mode in SyncMode], default=None)
	parser.add_argument('--offline', action='store_true', help='Do not fetch remote rule documents')
	parser.add_argument('-o', '--output', type=Path, default=None, help='Write the result here instead of stdout')
	return parser


async def run(args: argparse.Namespace) -> int:
	html = args.html_file.read_text(encoding='utf-8')
	page = LivePage(html, url=args.url)

	overrides = {}
	if args.engine:
		overrides['engine'] = EngineGeneration(args.engine)
	if args.sync_mode:
		overrides['sync_mode'] = SyncMode(args.sync_mode)
	settings = EngineSettings(**overrides)
	rules_service = RulesService(remote_enabled=False) if args.offline else RulesService()

	session = ElderlyModeSession.for_page(page, settings=settings, rules_service=rules_service)
	try:
		result = await session.activate()
		output = page.to_html()
	finally:
		await session.close()

	if args.output:
		args.output.write_text(output, encoding='utf-8')
		logger.info(f'💾 Wrote {args.output}')
	else:
		sys.stdout.write(output)

	logger.info(f'📋 {result.model_dump_json(exclude_none=True)}')
	return 1 if result.error else 0


def main(argv: list[str] | None = None) -> int:
	args = build_parser().parse_args(argv)
	# stdout carries the transformed page
	setup_logging(stream=sys.stderr, force_setup=True)
	return asyncio.run(run(args))


if __name__ == '__main__':
	sys.exit(main())
