import inquirer

from inquirer.themes import GreenPassion
from art import text2art
from colorama import Fore
from bot_loader import config

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table
from rich import box
from rich.text import Text


class Console:
    __slots__ = ("rich_console",)

    MODULES_DATA = (
        ("📜 Deploy contract", "deploy"),
        ("💸 Send MON from main wallet", "send"),
        ("🚰 Faucet", "faucet"),
        ("🔁 Rubic wrap/unwrap", "rubic"),
        ("🔁 Izumi wrap/unwrap", "izumi"),
        ("🥩 Magma stake", "magma"),
        ("🥩 aPriori stake", "apriori"),
        ("🥩 Kintsu stake", "kintsu"),
        ("🔄 Beanswap", "beanswap"),
        ("🔄 Monorail", "monorail"),
        ("🔄 Ambient", "ambient"),
        ("🦄 Uniswap", "uniswap"),
        ("🚀 Run all", "auto_route"),
        ("🚪 Exit", "exit"),
    )
    MODULES = tuple(label for label, _ in MODULES_DATA)
    # modules without cycles
    SINGLE_SHOT = frozenset({"deploy", "send", "faucet", "exit"})

    def __init__(self):
        self.rich_console = RichConsole()

    def show_dev_info(self):
        print("\033c", end="")

        styled_title = Text(text2art("Monad", font="doom"), style="cyan")
        content = Text.assemble(
            styled_title,
            "\n👉 Monad testnet automation 💜\n",
        )

        panel = Panel(
            content,
            border_style="yellow",
            expand=False,
            title="[bold green]Welcome[/bold green]",
            subtitle="[italic]Monad Bot[/italic]",
        )
        self.rich_console.print(panel)
        print()

    @staticmethod
    def prompt(data):
        return inquirer.prompt(data, theme=GreenPassion())

    @staticmethod
    def _validate_number(minimum: float, integer: bool):
        def validate(_, value: str) -> bool:
            try:
                number = int(value) if integer else float(value)
            except ValueError:
                return False
            return number >= minimum
        return validate

    def get_module(self) -> str:
        answers = self.prompt([
            inquirer.List(
                "module",
                message=Fore.LIGHTBLACK_EX + "Select the module",
                choices=self.MODULES,
            ),
        ])
        selected = answers.get("module")
        return dict(self.MODULES_DATA)[selected]

    def get_cycles(self) -> int:
        answers = self.prompt([
            inquirer.Text(
                "cycles",
                message=Fore.LIGHTBLACK_EX + "Number of cycles per account",
                default="1",
                validate=self._validate_number(1, integer=True),
            ),
        ])
        return int(answers["cycles"])

    def get_interval(self) -> float:
        answers = self.prompt([
            inquirer.Text(
                "interval",
                message=Fore.LIGHTBLACK_EX + "Repeat every N hours (0 = run once)",
                default="0",
                validate=self._validate_number(0, integer=False),
            ),
        ])
        return float(answers["interval"])

    def display_info(self):
        table = Table(title="System Configuration", box=box.ROUNDED)
        table.add_column("Parameter", style="cyan")
        table.add_column("Value", style="magenta")

        table.add_row("Accounts", str(len(config.accounts)))
        table.add_row("Threads", str(config.threads))
        table.add_row(
            "Delay before start",
            f"{config.delay_before_start.min}-{config.delay_before_start.max} sec",
        )
        table.add_row(
            "Delay between tasks",
            f"{config.delay_between_tasks.min}-{config.delay_between_tasks.max} sec",
        )
        table.add_row("RPC", config.monad_rpc)
        table.add_row("Captcha", config.captcha_type)

        self.rich_console.print(
            Panel(
                table,
                expand=False,
                border_style="green",
                title="[bold yellow]System Information[/bold yellow]",
                subtitle="[italic]Use arrow keys to navigate[/italic]",
            )
        )

    def show_results(self, results: list[tuple[int, str, bool, str]]):
        if not results:
            return

        table = Table(title=f"Results: {config.module}", box=box.ROUNDED)
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Address", style="magenta")
        table.add_column("Status")
        table.add_column("Message", overflow="fold")

        for index, address, success, message in results:
            status = "[green]OK[/green]" if success else "[red]FAIL[/red]"
            table.add_row(str(index), address, status, message)

        self.rich_console.print(table)

    def build(self):
        self.show_dev_info()
        self.display_info()
        config.module = self.get_module()
        if config.module == "exit":
            return

        config.cycles = 1 if config.module in self.SINGLE_SHOT else self.get_cycles()
        config.interval_hours = self.get_interval()
