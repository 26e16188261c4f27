from pathlib import Path

import click

from constants import INPUT_DIR, OUTPUT_DIR
from watch import setup_watch


@click.command()
@click.argument('input_dir', required=False, default=INPUT_DIR,
                type=click.Path(file_okay=False, path_type=Path))
@click.argument('output_dir', required=False, default=OUTPUT_DIR,
                type=click.Path(file_okay=False, path_type=Path))
def main(input_dir, output_dir):
    """
    Watch INPUT_DIR for new .bmp files and write grayscale, half-size and edge
    images plus metadata.json for each to OUTPUT_DIR/<name>/.
    """
    setup_watch(input_dir, output_dir)


if __name__ == '__main__':
    main()
