"""
Command-Line Interface for Relational Seeder

Provides commands for:
- init: Create tables and run the initial seeding
- cont: Initial seeding followed by continuous seeding
- plan: Show normalized entities and the dependency queue
"""

import argparse
import asyncio
import sys
import logging
from typing import Dict
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.panel import Panel

from seeder.config import SeederConfig, ConfigLoader
from seeder.seeder import Seeder
from seeder.schema import normalize, parse_entities
from seeder.dependencies import DependencyResolver
from seeder.exceptions import SeederError
from seeder.utils import setup_logging

# Setup console
console = Console()


class CLI:
    """Main CLI class"""

    def __init__(self):
        self.parser = self._create_parser()
        self.config_loader = ConfigLoader()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser"""
        parser = argparse.ArgumentParser(
            description="Relational Seeder CLI",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Seed once
  python cli.py init examples/shop.yaml

  # Seed, then keep inserting/updating/deleting
  python cli.py cont examples/shop.yaml --seed 42

  # Inspect the generation order
  python cli.py plan examples/shop.yaml
            """
        )

        parser.add_argument(
            '--verbose', '-v',
            action='store_true',
            help='Enable verbose output'
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        for name, help_text in (
            ('init', 'Create tables and run the initial seeding'),
            ('cont', 'Run the initial seeding, then continuous seeding'),
        ):
            command_parser = subparsers.add_parser(name, help=help_text)
            command_parser.add_argument('config', help='Seed configuration file (YAML)')
            command_parser.add_argument('--seed', '-s', type=int, help='Random seed for reproducibility')
            command_parser.add_argument('--dump', '-d', help='Write each pass\'s records to DIR/pass_<n>')
            command_parser.add_argument('--drop', action='store_true', help='Drop existing tables first')

        plan_parser = subparsers.add_parser('plan', help='Show entities and dependency order')
        plan_parser.add_argument('config', help='Seed configuration file (YAML)')

        return parser

    def run(self, args=None):
        """Run CLI"""
        args = self.parser.parse_args(args)

        # Setup logging
        log_level = logging.DEBUG if args.verbose else logging.INFO
        setup_logging(level=log_level)

        # Execute command
        if args.command == 'init':
            self.cmd_seed(args, continuous=False)
        elif args.command == 'cont':
            self.cmd_seed(args, continuous=True)
        elif args.command == 'plan':
            self.cmd_plan(args)
        else:
            self.parser.print_help()

    def _load_config(self, args) -> SeederConfig:
        config = self.config_loader.load_from_file(args.config)
        console.print(f"✓ Loaded configuration: {args.config}")

        if getattr(args, 'seed', None) is not None:
            config.seed = args.seed
        if getattr(args, 'drop', False):
            config.drop_existing = True
        return config

    def cmd_seed(self, args, continuous: bool):
        """Seed a database"""
        title = "Continuous Seeding" if continuous else "Initial Seeding"
        console.print(Panel.fit(
            f"🌱 [bold]{title}[/bold]",
            border_style="blue"
        ))

        try:
            config = self._load_config(args)
            if continuous:
                if config.continuous_iterations is None:
                    config.continuous_iterations = 0
            else:
                config.continuous_iterations = None

            seeder = Seeder(config, dump_directory=args.dump)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console
            ) as progress:
                task = progress.add_task("Seeding...", total=None)
                inserted = asyncio.run(seeder.start())
                progress.update(task, completed=True)

            self._print_summary(config, inserted)
            if args.dump:
                console.print(f"✓ Records of {seeder.pass_count} passes written to: {args.dump}")
            console.print("\n[bold green]✓ Seeding complete![/bold green]")

        except SeederError as e:
            console.print(f"[bold red]✗ Error:[/bold red] {str(e)}")
            sys.exit(1)
        except Exception as e:
            console.print(f"[bold red]✗ Error:[/bold red] {str(e)}")
            if args.verbose:
                console.print_exception()
            sys.exit(1)

    def _print_summary(self, config: SeederConfig, inserted: Dict[str, int]):
        table = Table(title="Seeding Summary", show_header=True)
        table.add_column("Entity", style="cyan")
        table.add_column("Rows Inserted", style="green")

        for name, count in inserted.items():
            table.add_row(name, f"{count:,}")

        table.add_row("[bold]Backend[/bold]", config.connection.client)
        table.add_row("[bold]Seed[/bold]", str(config.seed if config.seed is not None else "Random"))
        console.print(table)

    def cmd_plan(self, args):
        """Show the normalized schema and dependency queue"""
        console.print(Panel.fit(
            "🔍 [bold]Seeding Plan[/bold]",
            border_style="cyan"
        ))

        try:
            config = self._load_config(args)
            entities = parse_entities(normalize(config.schema))
            queue = DependencyResolver().resolve(entities)

            table = Table(title="Dependency Queue", show_header=True)
            table.add_column("Level", style="cyan")
            table.add_column("Entity", style="yellow")
            table.add_column("Count", style="green")
            table.add_column("Fields", style="white")
            table.add_column("Primary Key", style="blue")

            for level_index, level in enumerate(queue):
                for entry in level:
                    table.add_row(
                        str(level_index),
                        entry.name,
                        str(entry.entity.count),
                        ", ".join(entry.entity.fields),
                        ", ".join(entry.entity.primary_key) or "-",
                    )

            console.print(table)

        except SeederError as e:
            console.print(f"[bold red]✗ Error:[/bold red] {str(e)}")
            sys.exit(1)
        except Exception as e:
            console.print(f"[bold red]✗ Error:[/bold red] {str(e)}")
            if args.verbose:
                console.print_exception()
            sys.exit(1)


def main():
    """CLI entry point"""
    cli = CLI()
    cli.run()


if __name__ == "__main__":
    main()
