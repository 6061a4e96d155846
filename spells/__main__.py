import argparse
import logging
import time

import yaml

from .config import load_config
from .watcher import build_all, run_watcher

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
                        prog='spells',
                        description='Compiles Spells (.spl) pages to HTML, rebuilding them when they change.',
                        epilog='The config is a YAML file with write/watch/pretty/renderer keys.')
    parser.add_argument('config')
    parser.add_argument('--once', action='store_true', help='build once and exit instead of watching')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s - %(message)s',
                        datefmt='%Y-%m-%d %H:%M:%S')

    if args.once:
        cfg = load_config(args.config)
        built = build_all(cfg)
        return 0 if len(built) == len(cfg.write_pairs) else 1

    while True:
        try:
            cfg = load_config(args.config)
            build_all(cfg)
            run_watcher(cfg)
            return 0
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error("Error: %s", e)
            logger.error("Please check your configuration and try again, attempting to reload in 3 seconds...")
            time.sleep(3)
            continue


if __name__ == '__main__':
    raise SystemExit(main())
