"""Main entry point for the Alfajr tailoring bot."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from telegram import Chat, InputFile, Update
from telegram.error import TelegramError
from telegram.ext import (
    AIORateLimiter,
    Application,
    ApplicationBuilder,
    CallbackContext,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)
from telegram.request import HTTPXRequest

from .backup import BackupManager, export_customers, import_customers
from .catalog import (
    DELIVERY_DAYS,
    FEATURES_LIST,
    MEASUREMENT_FIELDS,
    SKIRT_MODELS,
    SLEEVE_MODELS,
    YAKHUN_MODELS,
    field_label,
    numbered,
)
from .config import Settings, is_admin
from .database import Database
from .errors import AlfajrError, CustomerNotFoundError
from .formatting import (
    customer_list,
    format_bytes,
    orders_text,
    payment_text,
    profile_text,
    stats_text,
)
from .labels import LabelBuilder, render_label_text
from .models import Customer
from .search import SEARCH_KINDS, advanced_search, quick_search

logger = logging.getLogger(__name__)

ACTIVATION_STATE_KEY = "pin_activated"
CURRENT_CUSTOMER_KEY = "current_customer"
CONFIRM_WORDS = {"بله", "آره", "yes", "y", "ok"}
MAX_MESSAGE_CHARS = 4000

HELP_TEXT = (
    "الفجر - سیستم مدیریت خیاطی\n\n"
    "/new نام شماره - مشتری جدید\n"
    "/list - همه مشتریان\n"
    "/find متن - جستجو با نام یا شماره\n"
    "/show شناسه - باز کردن پروفایل\n"
    "/measure اندازه مقدار - ثبت اندازه\n"
    "/yakhun /sleeve /skirt /feature - انتخاب مدل\n"
    "/price مبلغ - قیمت دوخت (افغانی)\n"
    "/paid - تغییر وضعیت پرداخت\n"
    "/delivery روز - روز تحویل\n"
    "/order جزئیات - سفارش جدید\n"
    "/orders - تاریخچه سفارش‌ها\n"
    "/note متن - یادداشت\n"
    "/label - لیبل چاپی\n"
    "/delete - حذف مشتری\n"
    "/search نوع مقدار - جستجوی پیشرفته (name, phone, yakhun, price, delivery)\n"
    "/stats - آمار\n"
    "/export - پشتیبان JSON\n"
    "/import - بازیابی از فایل JSON\n"
    "/backups - پشتیبان‌های خودکار\n"
    "/optimize - بهینه‌سازی دیتابیس\n"
    "/clear - پاک کردن همه داده‌ها\n\n"
    "بعد از /show، شناسه را می‌توانید در دستورات بعدی حذف کنید."
)


def _pending_requests(context: ContextTypes.DEFAULT_TYPE) -> dict[int, dict[str, Any]]:
    return context.bot_data.setdefault("pending_requests", {})


def _bot_activated(context: ContextTypes.DEFAULT_TYPE) -> bool:
    return bool(context.bot_data.get("activated", False))


def _set_activation_state(context: ContextTypes.DEFAULT_TYPE, enabled: bool) -> None:
    context.bot_data["activated"] = enabled
    db: Database = context.bot_data["db"]
    db.set_flag(ACTIVATION_STATE_KEY, enabled)


def _is_private(update: Update) -> bool:
    return bool(update.effective_chat and update.effective_chat.type == Chat.PRIVATE)


def _is_authorized(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    if not _is_private(update) or not update.effective_user:
        return False
    settings: Settings = context.bot_data["settings"]
    return is_admin(settings, update.effective_user.id)


async def _ensure_ready(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    if not _is_authorized(update, context):
        return False
    if _bot_activated(context):
        return True
    await update.effective_message.reply_text("ربات قفل است. با /activate و رمز آن را باز کنید.")
    return False


async def _reply(update: Update, text: str) -> None:
    chunk: list[str] = []
    size = 0
    for line in text.splitlines() or [text]:
        if chunk and size + len(line) + 1 > MAX_MESSAGE_CHARS:
            await update.effective_message.reply_text("\n".join(chunk))
            chunk, size = [], 0
        chunk.append(line)
        size += len(line) + 1
    await update.effective_message.reply_text("\n".join(chunk))


def _make_input_file(file_path: Path) -> InputFile:
    return InputFile(file_path.read_bytes(), filename=file_path.name)


def _select_customer(context: ContextTypes.DEFAULT_TYPE, customer_id: str | None) -> None:
    if customer_id is None:
        context.user_data.pop(CURRENT_CUSTOMER_KEY, None)
    else:
        context.user_data[CURRENT_CUSTOMER_KEY] = customer_id


async def _resolve_customer(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    *,
    takes_value: bool = False,
) -> tuple[Customer | None, list[str]]:
    """Pick the customer named by a leading id argument, else the selected one.

    Commands that take a value only read a leading id when a value follows it,
    so ``/price 12345678`` prices the selected customer.
    """

    db: Database = context.bot_data["db"]
    args = list(context.args or [])
    customer_id = context.user_data.get(CURRENT_CUSTOMER_KEY)
    id_allowed = len(args) > 1 if takes_value else bool(args)
    if id_allowed and args[0].isdigit() and db.customer_exists(args[0]):
        customer_id = args.pop(0)
    if not customer_id:
        await update.effective_message.reply_text("مشتری انتخاب نشده. ابتدا /show شناسه")
        return None, args
    customer = db.get_customer(customer_id)
    if customer is None or customer.deleted:
        _select_customer(context, None)
        await update.effective_message.reply_text(f"مشتری یافت نشد: {customer_id}")
        return None, args
    _select_customer(context, customer.id)
    return customer, args


async def _edit_customer(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    action: Callable[[Customer, list[str]], str],
    *,
    takes_value: bool = True,
) -> None:
    if not await _ensure_ready(update, context):
        return
    customer, args = await _resolve_customer(update, context, takes_value=takes_value)
    if customer is None:
        return
    before = customer.to_dict()
    try:
        reply = action(customer, args)
    except AlfajrError as exc:
        await update.effective_message.reply_text(str(exc))
        return
    if customer.to_dict() != before:
        db: Database = context.bot_data["db"]
        db.save_customer(customer)
    await update.effective_message.reply_text(reply)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_authorized(update, context):
        return
    text = HELP_TEXT
    if not _bot_activated(context):
        text += "\n\nوضعیت: قفل - /activate"
    await update.effective_message.reply_text(text)


async def activate_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_authorized(update, context):
        return
    if _bot_activated(context):
        await update.effective_message.reply_text("ربات از قبل باز است.")
        return
    _pending_requests(context)[update.effective_user.id] = {"type": "pin"}
    await update.effective_message.reply_text("رمز فعال‌سازی را بفرستید.")


async def lock_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_authorized(update, context):
        return
    if not _bot_activated(context):
        await update.effective_message.reply_text("ربات از قبل قفل است.")
        return
    _set_activation_state(context, False)
    logger.info("Bot locked by user %s", update.effective_user.id)
    await update.effective_message.reply_text("ربات قفل شد.")


async def _create_customer(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    name: str,
    phone: str,
) -> None:
    db: Database = context.bot_data["db"]
    try:
        customer = db.add_customer(name, phone)
    except AlfajrError as exc:
        await update.effective_message.reply_text(str(exc))
        return
    _select_customer(context, customer.id)
    logger.info("Added customer %s", customer.id)
    await update.effective_message.reply_text(f'مشتری "{customer.name}" اضافه شد')
    await _reply(update, profile_text(customer))


async def new_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    args = list(context.args or [])
    if len(args) >= 2:
        await _create_customer(update, context, " ".join(args[:-1]), args[-1])
        return
    pending = _pending_requests(context)
    if len(args) == 1:
        pending[update.effective_user.id] = {"type": "new_phone", "name": args[0]}
        await update.effective_message.reply_text("شماره مشتری:")
        return
    pending[update.effective_user.id] = {"type": "new_name"}
    await update.effective_message.reply_text("نام مشتری:")


async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    db: Database = context.bot_data["db"]
    customers = db.get_all_customers()
    await _reply(
        update,
        customer_list(customers, empty_text='مشتری وجود ندارد. با /new مشتری جدید اضافه کنید.'),
    )


async def find_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    db: Database = context.bot_data["db"]
    term = " ".join(context.args or []).strip()
    results = quick_search(db, term)
    if term and results:
        await update.effective_message.reply_text(f"{len(results)} مشتری یافت شد")
    await _reply(update, customer_list(results, empty_text=f'مشتری یافت نشد: "{term}"'))


async def _show_customer(update: Update, context: ContextTypes.DEFAULT_TYPE, customer_id: str) -> None:
    db: Database = context.bot_data["db"]
    customer = db.get_customer(customer_id)
    if customer is None or customer.deleted:
        await update.effective_message.reply_text(f"مشتری یافت نشد: {customer_id}")
        return
    _select_customer(context, customer.id)
    await _reply(update, profile_text(customer))


async def show_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    if context.args:
        await _show_customer(update, context, context.args[0])
        return
    customer, _ = await _resolve_customer(update, context)
    if customer is not None:
        await _reply(update, profile_text(customer))


async def show_link_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    match = context.matches[0] if context.matches else None
    if match:
        await _show_customer(update, context, match.group(1))


async def measure_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    def action(customer: Customer, args: list[str]) -> str:
        if len(args) < 2:
            return (
                "استفاده: /measure اندازه مقدار\n"
                + "، ".join(field_label(name) for name in MEASUREMENT_FIELDS)
            )
        field = customer.set_measurement(" ".join(args[:-1]), args[-1])
        return f"{field_label(field)}: {customer.measurements[field]}"

    await _edit_customer(update, context, action)


def _option_command(
    options: tuple[str, ...],
    title: str,
    apply: Callable[[Customer, str], str],
) -> Callable[[Update, ContextTypes.DEFAULT_TYPE], Any]:
    async def handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        def action(customer: Customer, args: list[str]) -> str:
            if not args:
                return f"{title}:\n{numbered(options)}"
            return apply(customer, " ".join(args))

        await _edit_customer(update, context, action)

    return handler


def _apply_yakhun(customer: Customer, value: str) -> str:
    return f"مدل یخن: {customer.set_yakhun(value)}"


def _apply_sleeve(customer: Customer, value: str) -> str:
    return f"مدل آستین: {customer.set_sleeve(value)}"


def _apply_skirt(customer: Customer, value: str) -> str:
    option, added = customer.toggle_skirt(value)
    return f"افزودن دامن: {option}" if added else f"حذف دامن: {option}"


def _apply_feature(customer: Customer, value: str) -> str:
    option, added = customer.toggle_feature(value)
    return f"افزودن ویژگی: {option}" if added else f"حذف ویژگی: {option}"


yakhun_command = _option_command(YAKHUN_MODELS, "مدل‌های یخن", _apply_yakhun)
sleeve_command = _option_command(SLEEVE_MODELS, "مدل‌های آستین", _apply_sleeve)
skirt_command = _option_command(SKIRT_MODELS, "مدل‌های دامن", _apply_skirt)
feature_command = _option_command(FEATURES_LIST, "ویژگی‌ها", _apply_feature)


async def price_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    def action(customer: Customer, args: list[str]) -> str:
        if not args:
            return "استفاده: /price مبلغ  (یا /price - برای پاک کردن)"
        customer.set_price(" ".join(args))
        return payment_text(customer)

    await _edit_customer(update, context, action)


async def paid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    def action(customer: Customer, args: list[str]) -> str:
        customer.toggle_payment()
        return "وضعیت پرداخت تغییر کرد\n" + payment_text(customer)

    await _edit_customer(update, context, action, takes_value=False)


async def delivery_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    def action(customer: Customer, args: list[str]) -> str:
        if not args:
            return f"روز تحویل:\n{numbered(DELIVERY_DAYS)}"
        return f"روز تحویل: {customer.set_delivery_day(' '.join(args))}"

    await _edit_customer(update, context, action)


async def order_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    def action(customer: Customer, args: list[str]) -> str:
        customer.add_order(" ".join(args))
        return f"سفارش اضافه شد (#{customer.total_orders})"

    await _edit_customer(update, context, action)


async def orders_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    customer, _ = await _resolve_customer(update, context)
    if customer is not None:
        await _reply(update, orders_text(customer))


async def note_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    def action(customer: Customer, args: list[str]) -> str:
        customer.set_notes(" ".join(args))
        return "یادداشت ذخیره شد" if customer.notes else "یادداشت پاک شد"

    await _edit_customer(update, context, action)


async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    customer, _ = await _resolve_customer(update, context)
    if customer is None:
        return
    _pending_requests(context)[update.effective_user.id] = {
        "type": "delete",
        "customer_id": customer.id,
    }
    await update.effective_message.reply_text(f'حذف مشتری "{customer.name}"؟ برای تایید "بله" بفرستید.')


async def label_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    customer, _ = await _resolve_customer(update, context)
    if customer is None:
        return
    builder: LabelBuilder = context.bot_data["labels"]
    path = builder.build(customer)
    await update.effective_message.reply_text(render_label_text(customer))
    try:
        await update.effective_message.reply_document(
            document=_make_input_file(path),
            caption="چاپ لیبل",
        )
    except TelegramError as exc:
        logger.warning("Failed to send label %s: %s", path, exc)
        await update.effective_message.reply_text("ارسال فایل لیبل ناموفق بود.")


async def search_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    args = list(context.args or [])
    if len(args) < 2:
        await update.effective_message.reply_text(
            "استفاده: /search نوع مقدار\n"
            f"انواع: {', '.join(SEARCH_KINDS)}\n"
            "قیمت: 1000-2000 یا >1000 یا <2000"
        )
        return
    db: Database = context.bot_data["db"]
    try:
        results = advanced_search(db, args[0], " ".join(args[1:]))
    except AlfajrError as exc:
        await update.effective_message.reply_text(str(exc))
        return
    await _reply(update, customer_list(results, empty_text="مشتری یافت نشد"))


async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    db: Database = context.bot_data["db"]
    await update.effective_message.reply_text(stats_text(db.counts_summary()))


async def export_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    db: Database = context.bot_data["db"]
    settings: Settings = context.bot_data["settings"]
    path = export_customers(db, settings.backup_dir)
    try:
        await update.effective_message.reply_document(
            document=_make_input_file(path),
            caption="داده‌ها ذخیره شد",
        )
    except TelegramError as exc:
        logger.warning("Failed to send backup %s: %s", path, exc)
        await update.effective_message.reply_text(f"پشتیبان روی سرور ذخیره شد: {path.name}")


async def import_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    _pending_requests(context)[update.effective_user.id] = {"type": "import"}
    await update.effective_message.reply_text("فایل پشتیبان JSON را بفرستید.")


async def handle_document(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    message = update.effective_message
    pending = _pending_requests(context)
    request = pending.get(update.effective_user.id)
    if not request or request.get("type") != "import":
        await message.reply_text("برای بازیابی ابتدا /import بفرستید.")
        return
    document = message.document
    if not document or not (document.file_name or "").lower().endswith(".json"):
        await message.reply_text("فقط فایل JSON پذیرفته می‌شود.")
        return

    try:
        telegram_file = await document.get_file()
        raw = await telegram_file.download_as_bytearray()
    except TelegramError as exc:
        logger.warning("Failed to download backup upload: %s", exc)
        await message.reply_text("دریافت فایل ناموفق بود. دوباره تلاش کنید.")
        return

    db: Database = context.bot_data["db"]
    try:
        result = import_customers(db, raw)
    except AlfajrError as exc:
        await message.reply_text(f"خطا در بارگذاری: {exc}")
        return
    pending.pop(update.effective_user.id, None)
    await message.reply_text(result.as_text())


async def optimize_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    db: Database = context.bot_data["db"]
    count = db.optimize()
    await update.effective_message.reply_text(
        f"بهینه‌سازی شد ({count} مشتری، {format_bytes(db.size_bytes())})"
    )


async def clear_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    _pending_requests(context)[update.effective_user.id] = {"type": "clear", "stage": 1}
    await update.effective_message.reply_text(
        'تمام داده‌ها پاک می‌شود! برای ادامه "بله" بفرستید.'
    )


async def backups_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _ensure_ready(update, context):
        return
    db: Database = context.bot_data["db"]
    records = db.list_backups(limit=10)
    if not records:
        await update.effective_message.reply_text("هنوز پشتیبانی گرفته نشده.")
        return
    lines = [
        f"#{record['id']} {record['created_at'][:16]} - {Path(record['path']).name} ({record['customer_count']})"
        for record in records
    ]
    await update.effective_message.reply_text("\n".join(lines))


async def _handle_dm_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_authorized(update, context):
        return
    user = update.effective_user
    message = update.effective_message
    if not message or not message.text or message.text.startswith("/"):
        return
    pending = _pending_requests(context)
    request = pending.get(user.id)
    if not request:
        return

    text = message.text.strip()
    req_type = request.get("type")
    settings: Settings = context.bot_data["settings"]
    db: Database = context.bot_data["db"]

    if req_type == "pin":
        if text != settings.activation_pin:
            await message.reply_text("رمز اشتباه است. دوباره تلاش کنید.")
            return
        pending.pop(user.id, None)
        _set_activation_state(context, True)
        logger.info("Bot unlocked by user %s", user.id)
        await message.reply_text("رمز درست است. ربات باز شد.\n\n" + HELP_TEXT)
        return

    if req_type == "new_name":
        if not text:
            await message.reply_text("لطفاً نام معتبر وارد کنید")
            return
        pending[user.id] = {"type": "new_phone", "name": text}
        await message.reply_text("شماره مشتری:")
        return

    if req_type == "new_phone":
        pending.pop(user.id, None)
        await _create_customer(update, context, request.get("name", ""), text)
        return

    confirmed = text.lower() in CONFIRM_WORDS

    if req_type == "delete":
        pending.pop(user.id, None)
        if not confirmed:
            await message.reply_text("حذف لغو شد.")
            return
        customer_id = request["customer_id"]
        try:
            db.delete_customer(customer_id)
        except CustomerNotFoundError as exc:
            await message.reply_text(str(exc))
            return
        if context.user_data.get(CURRENT_CUSTOMER_KEY) == customer_id:
            _select_customer(context, None)
        logger.info("Soft-deleted customer %s", customer_id)
        await message.reply_text("مشتری حذف شد")
        return

    if req_type == "clear":
        if not confirmed:
            pending.pop(user.id, None)
            await message.reply_text("پاک‌سازی لغو شد.")
            return
        if request.get("stage") == 1:
            pending[user.id] = {"type": "clear", "stage": 2}
            await message.reply_text('این عمل غیرقابل بازگشت است! مطمئن هستید؟ "بله" بفرستید.')
            return
        pending.pop(user.id, None)
        removed = db.clear_all_data()
        _select_customer(context, None)
        logger.warning("User %s cleared all customer data (%d rows)", user.id, removed)
        await message.reply_text("تمامی داده‌ها پاک شد")
        return

    if req_type == "import":
        await message.reply_text("فایل JSON را به صورت سند بفرستید.")


async def backup_job(context: CallbackContext) -> None:
    manager: BackupManager = context.job.data["backups"]
    try:
        path = manager.run()
    except (AlfajrError, OSError) as exc:
        logger.warning("Scheduled backup failed: %s", exc)
        return
    db: Database = context.job.data["db"]
    db.save_setting("last_backup_path", str(path))


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Unhandled error while processing update", exc_info=context.error)
    if isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text("خطای غیرمنتظره رخ داد.")
        except TelegramError:
            pass


def build_application(settings: Settings) -> Application:
    db = Database(settings.database_path)
    activated = db.get_flag(ACTIVATION_STATE_KEY, False)
    labels = LabelBuilder(settings.label_dir)
    backups = BackupManager(db, settings.backup_dir, keep=settings.backup_keep)

    request = HTTPXRequest(http_version="1.1", read_timeout=settings.http_timeout_seconds)
    application = (
        ApplicationBuilder()
        .token(settings.bot_token)
        .request(request)
        .rate_limiter(AIORateLimiter())
        .build()
    )

    application.bot_data["settings"] = settings
    application.bot_data["db"] = db
    application.bot_data["labels"] = labels
    application.bot_data["backups"] = backups
    application.bot_data["activated"] = activated

    private = filters.ChatType.PRIVATE
    commands: list[tuple[str, Callable[..., Any]]] = [
        ("start", start_command),
        ("help", start_command),
        ("activate", activate_command),
        ("lock", lock_command),
        ("new", new_command),
        ("list", list_command),
        ("find", find_command),
        ("show", show_command),
        ("measure", measure_command),
        ("yakhun", yakhun_command),
        ("sleeve", sleeve_command),
        ("skirt", skirt_command),
        ("feature", feature_command),
        ("price", price_command),
        ("paid", paid_command),
        ("delivery", delivery_command),
        ("order", order_command),
        ("orders", orders_command),
        ("note", note_command),
        ("delete", delete_command),
        ("label", label_command),
        ("search", search_command),
        ("stats", stats_command),
        ("export", export_command),
        ("import", import_command),
        ("optimize", optimize_command),
        ("clear", clear_command),
        ("backups", backups_command),
    ]
    for name, callback in commands:
        application.add_handler(CommandHandler(name, callback, filters=private))
    application.add_handler(
        MessageHandler(private & filters.Regex(r"^/show_(\d+)"), show_link_handler)
    )
    application.add_handler(MessageHandler(private & filters.Document.ALL, handle_document))
    application.add_handler(
        MessageHandler(private & filters.TEXT & ~filters.COMMAND, _handle_dm_message)
    )
    application.add_error_handler(error_handler)

    if settings.backup_interval_hours:
        application.job_queue.run_repeating(
            backup_job,
            interval=settings.backup_interval_hours * 3600,
            first=60,
            data={"db": db, "backups": backups},
        )

    return application


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    application = build_application(settings)
    try:
        application.run_polling(allowed_updates=Update.ALL_TYPES)
    finally:
        db = application.bot_data.get("db")
        if isinstance(db, Database):
            db.close()


if __name__ == "__main__":
    main()
