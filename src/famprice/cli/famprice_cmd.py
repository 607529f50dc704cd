#!/usr/bin/env python3
"""
トイレットペーパー・ティッシュ 単価比較 CLI

Usage:
    famprice list [--category toilet|tissue]
    famprice add toilet --name NAME --price 400 --length 30 --multiplier 2 --rolls 8
    famprice add tissue --name NAME --price 300 --pairs-per-box 150 --boxes 5
    famprice edit ID [--price 380 ...]
    famprice delete ID [--yes]
    famprice clear [--category tissue] [--yes]
    famprice migrate [--yes]
    famprice stores [QUERY]
"""

import argparse
import logging
import sys

from famprice.config import build_legacy_sources, build_store, load_settings
from famprice.errors import ConfigError, PersistenceError, ValidationError
from famprice.models import CATEGORIES, CATEGORY_LABELS, AppState, ProductInput
from famprice.notify import ConsoleNotifier
from famprice.pricebook import PriceBook
from famprice.ranking import (
    describe_quantities,
    format_registered_date,
    format_unit_price,
)


def open_book(args) -> PriceBook:
    """設定を読み込んで PriceBook を作り、保存先から読み込む"""
    settings = load_settings(args.env)
    logging.basicConfig(
        level=settings.log_level,
        format="[%(asctime)s] %(levelname)s: %(message)s",
    )
    book = PriceBook(
        store=build_store(settings),
        notifier=ConsoleNotifier(assume_yes=getattr(args, "yes", False)),
        state=AppState(user_id=settings.user_id),
        legacy_sources=build_legacy_sources(settings),
    )
    book.load()
    return book


def _entry_from_args(args, category: str, base=None) -> ProductInput:
    """引数から入力値を作る。base があれば未指定の項目は base の値を使う。"""
    def pick(name, attr=None):
        value = getattr(args, name, None)
        if value is None and base is not None:
            return getattr(base, attr or name)
        return value

    return ProductInput(
        name=pick("name") or "",
        price=pick("price"),
        category=category,
        store=pick("store") or "",
        memo=pick("memo") or "",
        length=pick("length"),
        multiplier=pick("multiplier"),
        rolls=pick("rolls"),
        pairs_per_box=pick("pairs_per_box"),
        boxes=pick("boxes"),
    )


def cmd_list(args):
    """ランキングを表示"""
    book = open_book(args)
    book.migrate_legacy()

    category = args.category or book.state.category
    book.select_category(category)
    ranked = book.ranking()

    label = CATEGORY_LABELS[category]
    if not ranked:
        print(f"{label}の商品はまだありません。")
        return

    print(f"=== {label} ({len(ranked)}件) ===\n")
    for row in ranked:
        product = row.product
        date = format_registered_date(product)
        store = product.store or "店舗未設定"
        print(f"[{row.badge}] {product.name}  ({store}{'  ' + date if date else ''})  id={product.id}")
        print(f"    {describe_quantities(product)}")
        print(f"    → {format_unit_price(product)}")
        if product.memo:
            print(f"    📝 {product.memo}")
    print()


def cmd_add(args):
    """商品を登録"""
    book = open_book(args)
    product = book.add(_entry_from_args(args, args.category))
    if product is None:
        sys.exit(1)
    print(f"  {product.name}: {format_unit_price(product)} (id={product.id})")


def cmd_edit(args):
    """商品を編集"""
    book = open_book(args)
    current = book.state.find(args.id)
    if current is None:
        print(f"エラー: id={args.id} の商品が見つかりません。", file=sys.stderr)
        sys.exit(1)

    entry = _entry_from_args(args, current.category, base=current)
    if current.pairs_per_box is None and entry.pairs_per_box is None:
        entry.pairs_per_box = current.sheets_per_box
    product = book.edit(args.id, entry)
    if product is None:
        sys.exit(1)
    print(f"  {product.name}: {format_unit_price(product)}")


def cmd_delete(args):
    """商品を削除"""
    book = open_book(args)
    if book.state.find(args.id) is None:
        print(f"エラー: id={args.id} の商品が見つかりません。", file=sys.stderr)
        sys.exit(1)
    book.delete(args.id)


def cmd_clear(args):
    """カテゴリの商品を全て削除"""
    book = open_book(args)
    book.clear_category(args.category)


def cmd_migrate(args):
    """旧データを移行"""
    book = open_book(args)
    result = book.migrate_legacy()
    if result.status == "nothing":
        print("旧データはありません。")
    elif result.status == "failed":
        sys.exit(1)


def cmd_stores(args):
    """登録済みの店舗名を表示"""
    book = open_book(args)
    for store in book.store_suggestions(args.query or ""):
        print(store)


def _add_product_options(p, required: bool):
    p.add_argument("--name", required=required, help="商品名")
    p.add_argument("--price", type=float, required=required, help="価格 (円)")
    p.add_argument("--store", help="店舗名")
    p.add_argument("--memo", help="メモ")
    p.add_argument("--length", type=float, help="1ロールの長さ (m)")
    p.add_argument("--multiplier", type=float, help="何倍巻き (デフォルト: 1)")
    p.add_argument("--rolls", type=float, help="ロール数")
    p.add_argument("--pairs-per-box", dest="pairs_per_box", type=float, help="1箱の組数")
    p.add_argument("--boxes", type=float, help="箱数")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="トイレットペーパー・ティッシュ 単価比較")
    parser.add_argument("--env", default=None, help=".envファイルのパス (default: .env)")
    subparsers = parser.add_subparsers(dest="command")

    # list コマンド
    p_list = subparsers.add_parser("list", help="単価ランキングを表示")
    p_list.add_argument("--category", choices=CATEGORIES, help="カテゴリ (デフォルト: toilet)")
    p_list.add_argument("--yes", action="store_true", help="確認をすべて yes で進める")

    # add コマンド
    p_add = subparsers.add_parser("add", help="商品を登録")
    p_add.add_argument("category", choices=CATEGORIES, help="カテゴリ")
    _add_product_options(p_add, required=True)

    # edit コマンド
    p_edit = subparsers.add_parser("edit", help="商品を編集")
    p_edit.add_argument("id", help="商品ID")
    _add_product_options(p_edit, required=False)

    # delete コマンド
    p_delete = subparsers.add_parser("delete", help="商品を削除")
    p_delete.add_argument("id", help="商品ID")
    p_delete.add_argument("--yes", action="store_true", help="確認せずに削除")

    # clear コマンド
    p_clear = subparsers.add_parser("clear", help="カテゴリの商品を全て削除")
    p_clear.add_argument("--category", choices=CATEGORIES, help="カテゴリ (デフォルト: toilet)")
    p_clear.add_argument("--yes", action="store_true", help="確認せずに削除")

    # migrate コマンド
    p_migrate = subparsers.add_parser("migrate", help="旧データを移行")
    p_migrate.add_argument("--yes", action="store_true", help="確認せずに移行")

    # stores コマンド
    p_stores = subparsers.add_parser("stores", help="登録済みの店舗名を表示")
    p_stores.add_argument("query", nargs="?", help="絞り込み文字列")

    return parser


COMMANDS = {
    "list": cmd_list,
    "add": cmd_add,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "clear": cmd_clear,
    "migrate": cmd_migrate,
    "stores": cmd_stores,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return

    try:
        command(args)
    except ConfigError as e:
        print(f"エラー: {e}", file=sys.stderr)
        sys.exit(1)
    except (ValidationError, PersistenceError) as e:
        print(f"エラー: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n中断しました。")
        sys.exit(1)


if __name__ == "__main__":
    main()
