from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.rule import Rule

from .catalog import TargetCatalog, load_catalog, save_catalog
from .config import ENDPOINTS_FILE, PROXIES_FILE, WALLETS_FILE, AutomationConfig
from .console import console, now_str
from .proxy import ProxyPool
from .storage import ConfigurationError, load_proxies, load_wallets, read_lines, write_lines
from .supervisor import SessionSupervisor


def ask_lines() -> List[str]:
    lines: List[str] = []
    while True:
        ln = Prompt.ask(">", default="", show_default=False).strip()
        if not ln:
            return lines
        lines.append(ln)


def pause() -> None:
    Prompt.ask("[muted]Press Enter to return to the main menu[/muted]", default="", show_default=False)


def manage_wallets(path: str) -> None:
    console.print(Rule(title="[title]Wallets[/title]"))
    wallets = read_lines(path)
    if wallets:
        for i, w in enumerate(wallets, 1):
            console.print(f"{i}. {escape(w)}")
    else:
        console.print(f"[warn]{path} is empty or missing; it will be created on save.[/warn]")
    action = Prompt.ask("[1] Overwrite list, [2] Append wallets, [0] Back", choices=["1", "2", "0"], default="0")
    if action == "0":
        return
    console.print("[info]Enter one wallet per line. An empty line finishes.[/info]")
    new = ask_lines()
    if action == "1":
        write_lines(path, new)
        console.print("[ok]Wallet list overwritten.[/ok]")
    else:
        write_lines(path, wallets + new)
        console.print("[ok]Wallets appended.[/ok]")
    pause()


def manage_questions(catalog: TargetCatalog, path: str) -> None:
    console.print(Rule(title="[title]Agent questions[/title]"))
    keys = catalog.keys()
    if not keys:
        console.print(f"[warn]No endpoints in {path}.[/warn]")
        pause()
        return
    for i, key in enumerate(keys, 1):
        t = catalog.get(key)
        console.print(f"{i}. [agent]{escape(t.name)}[/agent] [muted]({escape(key)})[/muted]")
    idx = IntPrompt.ask("Endpoint number (0 to go back)", default=0)
    if idx < 1 or idx > len(keys):
        return
    target = catalog.get(keys[idx - 1])
    console.print(f"[info]Current questions for \"{escape(target.name)}\":[/info]")
    if not target.questions:
        console.print("[warn]No questions.[/warn]")
    for i, q in enumerate(target.questions, 1):
        console.print(f"{i}. {escape(q)}")
    console.print("[info]Enter the new question list, one per line. An empty line finishes.[/info]")
    catalog.replace_questions(target.url, ask_lines())
    save_catalog(catalog, path)
    console.print("[ok]Questions updated.[/ok]")
    pause()


def run_automation(catalog: TargetCatalog, wallets_path: str, proxies_path: str,
                   config: Optional[AutomationConfig] = None) -> bool:
    console.print(Rule(title=f"[title]Start automation @ {now_str()}[/title]"))
    try:
        wallets = load_wallets(wallets_path)
    except ConfigurationError as e:
        console.print(f"[err]Could not load wallets: {escape(str(e))}[/err]")
        return False
    proxies = load_proxies(proxies_path)
    if not proxies:
        console.print("[info]No proxies loaded. Using a direct connection.[/info]")
    console.print(f"[info]📊 Loaded:[/info] [ok]{len(wallets)}[/ok] wallets and [ok]{len(proxies)}[/ok] proxies")
    console.print(Panel("Starting all sessions. Press Ctrl+C to stop.", border_style="info"))
    SessionSupervisor(wallets, ProxyPool(proxies), catalog, config=config).run()
    console.print(Rule(title=f"[title]Automation stopped @ {now_str()}[/title]"))
    return True


def menu(args: argparse.Namespace, catalog: TargetCatalog) -> None:
    while True:
        console.print(Rule(title="[title]Kite AI Agent Runner[/title]"))
        console.print(f"1. Manage wallets ({args.wallets})")
        console.print(f"2. Edit agent questions ({args.endpoints})")
        console.print("3. Run automation")
        console.print("0. Exit")
        choice = Prompt.ask("Your choice", choices=["1", "2", "3", "0"], show_choices=False)
        if choice == "1":
            manage_wallets(args.wallets)
        elif choice == "2":
            manage_questions(catalog, args.endpoints)
        elif choice == "3":
            run_automation(catalog, args.wallets, args.proxies)
            pause()
        else:
            console.print("[info]Bye.[/info]")
            return


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="kite-agent", description="Kite AI agent interaction runner")
    p.add_argument("--wallets", default=WALLETS_FILE, help="wallet list, one address per line")
    p.add_argument("--proxies", default=PROXIES_FILE, help="proxy list, one proxy per line")
    p.add_argument("--endpoints", default=ENDPOINTS_FILE, help="endpoint / question catalog (JSON)")
    p.add_argument("--run", action="store_true", help="start automation without the menu")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        catalog = load_catalog(args.endpoints)
        if args.run:
            return 0 if run_automation(catalog, args.wallets, args.proxies) else 1
        menu(args, catalog)
    except KeyboardInterrupt:
        console.print("\n[warn]🛑 Shutting down...[/warn]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
