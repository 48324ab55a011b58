"""CLI entry point for scivo."""

from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from scivo import __version__
from scivo.book import Book, BookBuilder, Conversation, RoomId
from scivo.config import ConfigError, load_config
from scivo.errors import FormatError, ResourceNotFoundError, UnsupportedResourceError
from scivo.logger import ConsoleLogger, LogConfig, VerboseLevel
from scivo.resource import (
    ResourceStore,
    ResourceType,
    extract_as_patch,
    open_main_store,
    open_message_store,
    patch_filename,
)
from scivo.types import ExitCode

app = typer.Typer(help="SCIリソースアーカイブとボイス収録台本を扱うCLIツール")
console = Console()

resource_app = typer.Typer(help="リソースアーカイブ操作")
app.add_typer(resource_app, name="resource")

book_app = typer.Typer(help="ボイス収録台本（ブック）操作")
app.add_typer(book_app, name="book")


def _format_size(size_bytes: int) -> str:
    """バイト数を人間が読みやすい形式に変換する"""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def _create_logger(ctx: typer.Context) -> ConsoleLogger:
    config = ctx.obj if isinstance(ctx.obj, LogConfig) else LogConfig()
    logger = ConsoleLogger(config)
    logger.attach_library_logging()
    return logger


def _fail(message: str, exit_code: ExitCode = ExitCode.ERROR) -> typer.Exit:
    console.print(f"[red]Error: {escape(message)}[/red]")
    return typer.Exit(int(exit_code))


def _open_store(opener: Callable[[Path], ResourceStore], root_dir: Path) -> ResourceStore:
    try:
        return opener(root_dir)
    except OSError as e:
        raise _fail(f"アーカイブを開けません: {e}") from e
    except FormatError as e:
        raise _fail(f"マップファイルが不正です: {e}") from e


def _list_store(ctx: typer.Context, store: ResourceStore, title: str) -> None:
    table = Table(title=title)
    table.add_column("種別", style="cyan")
    table.add_column("番号", justify="right")
    table.add_column("オフセット", justify="right")
    table.add_column("格納サイズ", justify="right")
    table.add_column("展開後サイズ", justify="right")
    table.add_column("圧縮", justify="right")
    table.add_column("状態", justify="left")

    succeeded = 0
    failed = 0
    with _create_logger(ctx) as logger:
        for result in store.read_raw_contents():
            resource_id = result.location.resource_id
            if result.contents is not None:
                header = result.contents.header
                table.add_row(
                    resource_id.resource_type.name,
                    str(resource_id.number),
                    f"0x{result.location.offset:08X}",
                    _format_size(header.packed_size),
                    _format_size(header.unpacked_size),
                    str(header.compression),
                    "[green]OK[/green]",
                )
                succeeded += 1
            else:
                table.add_row(
                    resource_id.resource_type.name,
                    str(resource_id.number),
                    f"0x{result.location.offset:08X}",
                    "-",
                    "-",
                    "-",
                    f"[red]{escape(str(result.error))}[/red]",
                )
                failed += 1

        console.print(table)
        logger.log_summary(succeeded, failed)

    raise typer.Exit(int(ExitCode.ERROR if failed else ExitCode.SUCCESS))


@resource_app.command("list")
def resource_list(
    ctx: typer.Context,
    root_dir: Annotated[Path, typer.Argument(help="ゲームディレクトリ")],
) -> None:
    """メインアーカイブのリソースヘッダーを一覧表示する"""
    store = _open_store(open_main_store, root_dir)
    _list_store(ctx, store, "リソース一覧")


@resource_app.command("list-msg")
def resource_list_msg(
    ctx: typer.Context,
    root_dir: Annotated[Path, typer.Argument(help="ゲームディレクトリ")],
) -> None:
    """メッセージアーカイブのリソースヘッダーを一覧表示する"""
    store = _open_store(open_message_store, root_dir)
    _list_store(ctx, store, "メッセージリソース一覧")


@resource_app.command("extract-as-patch")
def resource_extract_as_patch(
    ctx: typer.Context,
    root_dir: Annotated[Path, typer.Argument(help="ゲームディレクトリ")],
    resource_type: Annotated[str, typer.Argument(help="リソース種別（script / heap）")],
    resource_number: Annotated[int, typer.Argument(help="リソース番号")],
    dry_run: Annotated[
        bool, typer.Option("-n", "--dry-run", help="ファイルを書き出さずに確認のみ行う")
    ] = False,
    output_dir: Annotated[
        Path | None, typer.Option("-o", "--output-dir", help="出力先ディレクトリ")
    ] = None,
) -> None:
    """リソースをパッチファイルとして書き出す"""
    try:
        parsed_type = ResourceType.parse(resource_type)
        patch_filename(parsed_type, resource_number)
    except (ValueError, UnsupportedResourceError) as e:
        raise _fail(str(e), ExitCode.INVALID_INPUT) from e

    store = _open_store(open_main_store, root_dir)
    out_dir = output_dir if output_dir is not None else root_dir

    with _create_logger(ctx) as logger:
        try:
            result = extract_as_patch(store, parsed_type, resource_number, out_dir, dry_run=dry_run)
        except ResourceNotFoundError as e:
            raise _fail(str(e), ExitCode.NOT_FOUND) from e
        except FileExistsError as e:
            raise _fail(str(e)) from e
        except (OSError, FormatError) as e:
            raise _fail(f"パッチの書き出しに失敗しました: {e}") from e

        prefix = "DRY_RUN: " if result.dry_run else ""
        logger.info(f"{prefix}{result.resource_id} -> {result.path} ({_format_size(result.size)})")

    raise typer.Exit(int(ExitCode.SUCCESS))


def _load_book(root_dir: Path, config_path: Path) -> Book:
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise _fail(str(e), ExitCode.INVALID_INPUT) from e

    store = _open_store(open_message_store, root_dir)
    try:
        return BookBuilder(config).build(store)
    except (OSError, FormatError) as e:
        raise _fail(f"ブックを構築できません: {e}") from e


def _conversation_label(conversation: Conversation) -> str:
    verb = conversation.verb()
    condition = conversation.condition()
    parts = [f"動詞: {escape(verb.name) if verb is not None else '-'}"]
    if condition is not None:
        parts.append(f"条件: {escape(condition.desc or str(condition.raw_id))}")
    elif conversation.key.has_condition:
        parts.append(f"条件: {conversation.key.condition} (解除済み)")
    return f"[yellow]{' / '.join(parts)}[/yellow]"


@book_app.command("show")
def book_show(
    ctx: typer.Context,
    root_dir: Annotated[Path, typer.Argument(help="ゲームディレクトリ")],
    config_path: Annotated[Path, typer.Argument(help="ブック設定ファイル（YAML）")],
    room: Annotated[int | None, typer.Option("--room", help="表示する部屋番号")] = None,
) -> None:
    """ブックを部屋・名詞・会話・セリフのツリーで表示する"""
    with _create_logger(ctx):
        book = _load_book(root_dir, config_path)

    if room is not None:
        selected = book.get_room(RoomId(room))
        if selected is None:
            raise _fail(f"部屋が見つかりません: {room}", ExitCode.NOT_FOUND)
        rooms = [selected]
    else:
        rooms = list(book.rooms())

    tree = Tree("[bold]Book[/bold]")
    for room_handle in rooms:
        room_node = tree.add(f"[cyan]{room_handle.id()}[/cyan] {escape(room_handle.name)}")
        for noun in room_handle.nouns():
            noun_node = room_node.add(f"[magenta]{noun.id()}[/magenta] {escape(noun.desc or '')}")
            for conversation in noun.conversations():
                conversation_node = noun_node.add(_conversation_label(conversation))
                for line in conversation.lines():
                    speaker = escape(line.role().short_name)
                    text = escape(line.text)
                    conversation_node.add(f"{line.raw_id}. [bold]{speaker}[/bold]: {text}")

    console.print(tree)
    raise typer.Exit(int(ExitCode.SUCCESS))


@book_app.command("roles")
def book_roles(
    ctx: typer.Context,
    root_dir: Annotated[Path, typer.Argument(help="ゲームディレクトリ")],
    config_path: Annotated[Path, typer.Argument(help="ブック設定ファイル（YAML）")],
) -> None:
    """役割ごとのセリフ数を表示する"""
    with _create_logger(ctx):
        book = _load_book(root_dir, config_path)

    counts: dict[str, int] = {role.raw_id: 0 for role in book.roles()}
    for line in book.lines():
        counts[line.role().raw_id] += 1

    table = Table(title="役割一覧")
    table.add_column("ID", style="cyan")
    table.add_column("名前", justify="left")
    table.add_column("短縮名", justify="left")
    table.add_column("セリフ数", justify="right")
    for role in book.roles():
        table.add_row(role.raw_id, role.name, role.short_name, str(counts[role.raw_id]))

    console.print(table)
    raise typer.Exit(int(ExitCode.SUCCESS))


def version_callback(value: bool) -> None:
    """バージョン表示コールバック"""
    if value:
        typer.echo(f"scivo {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="バージョンを表示する",
        ),
    ] = False,
    verbose: Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")] = 0,
    quiet: Annotated[bool, typer.Option("-q", "--quiet", help="エラー以外を出力しない")] = False,
    log_file: Annotated[Path | None, typer.Option(help="ログファイル出力先")] = None,
) -> None:
    """scivo CLI - SCIリソースアーカイブとボイス収録台本"""
    ctx.obj = LogConfig(
        verbose_level=VerboseLevel.from_count(verbose, quiet=quiet),
        log_file=log_file,
    )
