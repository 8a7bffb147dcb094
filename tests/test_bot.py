"""Handler tests driven through fake Telegram updates."""

import json
import re
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from alfajr import bot
from conftest import make_update, replies


async def run(handler, context, text="", *args, **kwargs):
    context.args = list(args)
    update = make_update(text, **kwargs)
    await handler(update, context)
    return update


@pytest.fixture
def customer(db, bot_context):
    created = db.add_customer("Ahmad", "0700123456")
    bot_context.user_data[bot.CURRENT_CUSTOMER_KEY] = created.id
    return created


class TestAccess:
    async def test_group_chats_are_ignored(self, bot_context):
        update = await run(bot.list_command, bot_context, chat_type="group")
        update.effective_message.reply_text.assert_not_awaited()

    async def test_non_admin_is_ignored(self, bot_context):
        bot_context.bot_data["settings"].admin_user_ids = frozenset({1})
        update = await run(bot.list_command, bot_context, user_id=2)
        update.effective_message.reply_text.assert_not_awaited()

    async def test_locked_bot_asks_for_activation(self, bot_context):
        bot_context.bot_data["activated"] = False
        update = await run(bot.list_command, bot_context)
        assert "/activate" in replies(update)[0]

    async def test_pin_flow_unlocks(self, bot_context, db):
        bot_context.bot_data["activated"] = False
        await run(bot.activate_command, bot_context)
        wrong = await run(bot._handle_dm_message, bot_context, "0000")
        assert "اشتباه" in replies(wrong)[0]
        await run(bot._handle_dm_message, bot_context, "4321")
        assert bot_context.bot_data["activated"] is True
        assert db.get_flag(bot.ACTIVATION_STATE_KEY) is True

    async def test_lock(self, bot_context, db):
        await run(bot.lock_command, bot_context)
        assert bot_context.bot_data["activated"] is False
        assert db.get_flag(bot.ACTIVATION_STATE_KEY, True) is False


class TestCustomers:
    async def test_new_with_arguments(self, bot_context, db):
        update = await run(bot.new_command, bot_context, "", "Ahmad", "Shah", "0700")
        [created] = db.get_all_customers()
        assert created.name == "Ahmad Shah"
        assert created.phone == "0700"
        assert bot_context.user_data[bot.CURRENT_CUSTOMER_KEY] == created.id
        assert "Ahmad Shah" in replies(update)[0]

    async def test_new_prompts_for_name_then_phone(self, bot_context, db):
        await run(bot.new_command, bot_context)
        await run(bot._handle_dm_message, bot_context, "Karim")
        await run(bot._handle_dm_message, bot_context, "0799")
        [created] = db.get_all_customers()
        assert (created.name, created.phone) == ("Karim", "0799")

    async def test_new_rejects_blank_phone(self, bot_context, db):
        await run(bot.new_command, bot_context, "", "Karim")
        update = await run(bot._handle_dm_message, bot_context, "   ")
        assert db.get_all_customers() == []
        assert "شماره" in replies(update)[0]

    async def test_show_by_id_selects_customer(self, bot_context, db):
        other = db.add_customer("Karim", "0799")
        update = await run(bot.show_command, bot_context, "", other.id)
        assert bot_context.user_data[bot.CURRENT_CUSTOMER_KEY] == other.id
        assert "Karim" in replies(update)[0]

    async def test_show_link(self, bot_context, customer):
        bot_context.matches = [re.match(r"^/show_(\d+)", f"/show_{customer.id}")]
        update = await run(bot.show_link_handler, bot_context, f"/show_{customer.id}")
        assert customer.id in replies(update)[0]

    async def test_edit_without_selection(self, bot_context):
        update = await run(bot.paid_command, bot_context)
        assert "انتخاب نشده" in replies(update)[0]

    async def test_find_and_list(self, bot_context, customer):
        found = await run(bot.find_command, bot_context, "", "ahm")
        assert customer.id in "\n".join(replies(found))
        missing = await run(bot.find_command, bot_context, "", "zzz")
        assert "یافت نشد" in replies(missing)[0]


class TestEdits:
    async def test_measure(self, bot_context, db, customer):
        update = await run(bot.measure_command, bot_context, "", "دور", "سینه", "42")
        assert db.get_customer(customer.id).measurements["دور_سینه"] == "42"
        assert "42" in replies(update)[0]

    async def test_measure_with_explicit_id(self, bot_context, db, customer):
        other = db.add_customer("Karim", "0799")
        await run(bot.measure_command, bot_context, "", other.id, "قد", "40")
        assert db.get_customer(other.id).measurements["قد"] == "40"
        assert bot_context.user_data[bot.CURRENT_CUSTOMER_KEY] == other.id

    async def test_lone_value_matching_an_id_edits_selected_customer(self, bot_context, db, customer):
        other = db.add_customer("Karim", "0799")
        await run(bot.price_command, bot_context, "", other.id)
        assert db.get_customer(customer.id).sewing_price_afghani == int(other.id)
        assert db.get_customer(other.id).sewing_price_afghani is None
        assert bot_context.user_data[bot.CURRENT_CUSTOMER_KEY] == customer.id

    async def test_paid_with_explicit_id(self, bot_context, db, customer):
        other = db.add_customer("Karim", "0799")
        await run(bot.paid_command, bot_context, "", other.id)
        assert db.get_customer(other.id).payment_received is True
        assert db.get_customer(customer.id).payment_received is False

    async def test_option_list_does_not_save(self, bot_context, db, customer):
        version = db.get_customer(customer.id).version
        update = await run(bot.yakhun_command, bot_context)
        assert "1. آف دار" in replies(update)[0]
        assert db.get_customer(customer.id).version == version

    async def test_styles(self, bot_context, db, customer):
        await run(bot.yakhun_command, bot_context, "", "ملی")
        await run(bot.sleeve_command, bot_context, "", "2")
        await run(bot.skirt_command, bot_context, "", "دامن", "گاوی")
        await run(bot.feature_command, bot_context, "", "1")
        stored = db.get_customer(customer.id)
        assert stored.models.yakhun == "ملی"
        assert stored.models.sleeve == "ساده شیش بخیه"
        assert stored.models.skirt == ["دامن گاوی"]
        assert stored.models.features == ["جیب رو"]

    async def test_invalid_option_reports_error(self, bot_context, db, customer):
        update = await run(bot.yakhun_command, bot_context, "", "گرد")
        assert "نامعتبر" in replies(update)[0]
        assert db.get_customer(customer.id).models.yakhun == ""

    async def test_price_paid_delivery(self, bot_context, db, customer):
        await run(bot.price_command, bot_context, "", "1500")
        await run(bot.paid_command, bot_context)
        await run(bot.delivery_command, bot_context, "", "جمعه")
        stored = db.get_customer(customer.id)
        assert stored.sewing_price_afghani == 1500
        assert stored.payment_received is True
        assert stored.delivery_day == "جمعه"

    async def test_order_and_note(self, bot_context, db, customer):
        await run(bot.order_command, bot_context, "", "two", "shirts")
        await run(bot.note_command, bot_context, "", "blue", "thread")
        stored = db.get_customer(customer.id)
        assert stored.orders[0].details == "two shirts"
        assert stored.notes == "blue thread"
        update = await run(bot.orders_command, bot_context)
        assert "two shirts" in replies(update)[0]


class TestDestructive:
    async def test_delete_needs_confirmation(self, bot_context, db, customer):
        await run(bot.delete_command, bot_context)
        await run(bot._handle_dm_message, bot_context, "نه")
        assert db.get_customer(customer.id).deleted is False

        await run(bot.delete_command, bot_context)
        await run(bot._handle_dm_message, bot_context, "بله")
        assert db.get_customer(customer.id).deleted is True
        assert bot.CURRENT_CUSTOMER_KEY not in bot_context.user_data

    async def test_clear_needs_two_confirmations(self, bot_context, db, customer):
        await run(bot.clear_command, bot_context)
        await run(bot._handle_dm_message, bot_context, "بله")
        assert db.get_all_customers() != []
        await run(bot._handle_dm_message, bot_context, "yes")
        assert db.get_all_customers(include_deleted=True) == []


class TestFilesAndReports:
    async def test_export_sends_document(self, bot_context, customer, settings):
        update = await run(bot.export_command, bot_context)
        update.effective_message.reply_document.assert_awaited_once()
        [path] = list(settings.backup_dir.glob("alfajr-backup-*.json"))
        assert json.loads(path.read_text(encoding="utf-8"))[0]["id"] == customer.id

    async def test_label_sends_text_and_file(self, bot_context, customer, settings):
        update = await run(bot.label_command, bot_context)
        assert "Ahmad" in replies(update)[0]
        update.effective_message.reply_document.assert_awaited_once()
        assert (settings.label_dir / f"label-{customer.id}.html").exists()

    async def test_import_document(self, bot_context, db):
        payload = json.dumps([{"id": "11112222", "name": "Nabi", "phone": "0788"}]).encode("utf-8")
        telegram_file = SimpleNamespace(download_as_bytearray=AsyncMock(return_value=bytearray(payload)))
        document = SimpleNamespace(file_name="backup.json", get_file=AsyncMock(return_value=telegram_file))

        await run(bot.import_command, bot_context)
        update = await run(bot.handle_document, bot_context, document=document)

        assert db.get_customer("11112222").name == "Nabi"
        assert "1" in replies(update)[0]
        assert 7 not in bot_context.bot_data["pending_requests"]

    async def test_document_without_import_request(self, bot_context, db):
        document = SimpleNamespace(file_name="backup.json", get_file=AsyncMock())
        update = await run(bot.handle_document, bot_context, document=document)
        assert "/import" in replies(update)[0]
        document.get_file.assert_not_awaited()

    async def test_bad_import_keeps_request_open(self, bot_context):
        telegram_file = SimpleNamespace(download_as_bytearray=AsyncMock(return_value=bytearray(b"{}")))
        document = SimpleNamespace(file_name="backup.json", get_file=AsyncMock(return_value=telegram_file))
        await run(bot.import_command, bot_context)
        update = await run(bot.handle_document, bot_context, document=document)
        assert "خطا" in replies(update)[0]
        assert bot_context.bot_data["pending_requests"][7]["type"] == "import"

    async def test_search_and_stats(self, bot_context, db, customer):
        await run(bot.price_command, bot_context, "", "1500")
        found = await run(bot.search_command, bot_context, "", "price", "1000-2000")
        assert customer.id in replies(found)[0]
        usage = await run(bot.search_command, bot_context, "", "price")
        assert "price" in replies(usage)[0]
        stats = await run(bot.stats_command, bot_context)
        assert "مشتریان: 1" in replies(stats)[0]

    async def test_optimize_and_backups(self, bot_context, customer):
        empty = await run(bot.backups_command, bot_context)
        assert "پشتیبانی" in replies(empty)[0]
        await run(bot.export_command, bot_context)
        listed = await run(bot.backups_command, bot_context)
        assert "alfajr-backup-" in replies(listed)[0]
        optimized = await run(bot.optimize_command, bot_context)
        assert "1" in replies(optimized)[0]

    async def test_backup_job(self, bot_context, db, settings):
        db.add_customer("Ahmad", "0700")
        job_context = SimpleNamespace(
            job=SimpleNamespace(data={"db": db, "backups": bot_context.bot_data["backups"]})
        )
        await bot.backup_job(job_context)
        assert db.get_setting("last_backup_path").endswith(".json")
        assert len(db.list_backups()) == 1


async def test_long_replies_are_split(bot_context):
    update = make_update()
    await bot._reply(update, "\n".join("x" * 100 for _ in range(100)))
    sent = replies(update)
    assert len(sent) == 3
    assert all(len(chunk) <= bot.MAX_MESSAGE_CHARS for chunk in sent)
