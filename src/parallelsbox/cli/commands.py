#!/usr/bin/env python3
"""
VM lifecycle and network commands for the parallelsbox CLI.
"""

import json

from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from parallelsbox.cli.utils import build_driver, console, setup
from parallelsbox.di import get_container
from parallelsbox.driver.meta import read_version
from parallelsbox.interfaces.process import ProcessRunner
from parallelsbox.models import VMState

STATE_STYLES = {
    VMState.RUNNING: "green",
    VMState.STOPPED: "red",
    VMState.SUSPENDED: "yellow",
    VMState.INACCESSIBLE: "magenta",
    VMState.NOT_CREATED: "dim",
}


def cmd_version(args) -> None:
    """Show the installed Parallels Desktop version."""
    settings = setup(args)
    version = read_version(get_container().resolve(ProcessRunner), settings)
    console.print(f"Parallels Desktop [cyan]{version}[/]")


def cmd_list(args) -> None:
    """List registered VMs."""
    driver = build_driver(args)
    vms = driver.read_vms_info()

    if args.json:
        console.print(json.dumps(vms, indent=2))
        return

    if not vms:
        console.print("[dim]No VMs found[/]")
        return

    table = Table(title="Virtual Machines")
    table.add_column("UUID", style="cyan")
    table.add_column("Name")
    table.add_column("State", style="green")

    for vm in vms:
        state = str(vm.get("State", "-"))
        state_style = "green" if state == "running" else "red"
        table.add_row(
            str(vm.get("ID", "-")),
            str(vm.get("Name", "-")),
            f"[{state_style}]{state}[/{state_style}]",
        )

    console.print(table)


def cmd_status(args) -> None:
    """Show the state of a VM."""
    driver = build_driver(args, args.uuid)
    state = driver.read_state()
    style = STATE_STYLES[state]
    console.print(f"[{style}]{state.value}[/{style}]")
    if args.verbose:
        console.print(f"[dim]{state.description}[/]")


def cmd_start(args) -> None:
    """Start a VM."""
    driver = build_driver(args, args.uuid)
    if driver.read_state() == VMState.RUNNING:
        console.print("[yellow]Parallels Desktop VM is already running.[/]")
        return
    driver.start("gui" if args.gui else "headless")
    console.print(f"[green]Started {args.uuid}[/]")


def cmd_halt(args) -> None:
    """Halt a VM."""
    build_driver(args, args.uuid).halt()
    console.print(f"[green]Halted {args.uuid}[/]")


def cmd_suspend(args) -> None:
    """Suspend a VM."""
    build_driver(args, args.uuid).suspend()
    console.print(f"[green]Suspended {args.uuid}[/]")


def cmd_delete(args) -> None:
    """Delete a VM."""
    build_driver(args, args.uuid).delete()
    console.print(f"[green]Deleted {args.uuid}[/]")


def cmd_export(args) -> None:
    """Export a VM as a template bundle."""
    driver = build_driver(args, args.uuid)
    with Progress(
        TextColumn("[cyan]Exporting"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
    ) as progress:
        task = progress.add_task("export", total=100)
        driver.export(args.path, on_progress=lambda pct: progress.update(task, completed=pct))
    console.print(f"[green]Exported {args.uuid} to {args.path}[/]")


def cmd_networks(args) -> None:
    """List host-only and bridged networks."""
    driver = build_driver(args)

    table = Table(title="Networks")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("IP", style="yellow")
    table.add_column("Netmask")
    table.add_column("Status")

    for net in driver.read_host_only_interfaces():
        table.add_row(
            net["name"], "host-only", net["ip"] or "-", net["netmask"] or "-", net["status"]
        )
    for net in driver.read_bridged_interfaces():
        table.add_row(str(net["name"] or "-"), "bridged", "-", "-", net["status"])

    console.print(table)

    if args.prune:
        driver.delete_unused_host_only_networks()
        console.print("[green]Removed unused host-only networks[/]")
