"""User-facing texts and keyboard layouts."""

from __future__ import annotations

import textwrap
from enum import Enum

from ..models.transaction import TransactionType, TransferDirection
from ..schemas.report import ReportSnapshot
from ..schemas.transaction import TransactionCreate
from .helpers import account_label, format_money

BUTTON_INCOME = "➕ Thu"
BUTTON_EXPENSE = "➖ Chi"
BUTTON_WITHDRAW = "🏧 Rút"
BUTTON_DEPOSIT = "🏦 Nạp"
BUTTON_REPORT = "📈 Thống kê"
BUTTON_HELP = "📘 Help"
BUTTON_CANCEL = "❌ Hủy"


class Keyboard(str, Enum):
    """Keyboard hint attached to an outbound message."""

    MAIN = "main"
    CONVERSATION = "conversation"


KEYBOARD_LAYOUTS: dict[Keyboard, list[list[str]]] = {
    Keyboard.MAIN: [
        [BUTTON_INCOME, BUTTON_EXPENSE],
        [BUTTON_WITHDRAW, BUTTON_DEPOSIT],
        [BUTTON_REPORT, BUTTON_HELP],
        [BUTTON_CANCEL],
    ],
    Keyboard.CONVERSATION: [[BUTTON_CANCEL]],
}

MENU_PROMPT = "Chọn thao tác bên dưới:"
MENU_RESET_PROMPT = "Chọn thao tác bằng nút bên dưới:"
CANCELLED = "Đã hủy thao tác hiện tại."
PENDING_FLOW_NOTICE = "Bạn đang nhập dở một thao tác. Bấm ❌ Hủy để hủy thao tác hiện tại."
CONVERSATION_ERROR = "❌ Có lỗi khi xử lý hội thoại. Vui lòng thử lại."
SAVE_FAILED = "❌ Không thể lưu dữ liệu. Vui lòng nhập lại từ đầu."
REPORT_FAILED = "❌ Không thể lấy thống kê."

AMOUNT_PROMPTS = {
    "income": "Nhập số tiền bạn muốn ghi nhận",
    "expense": "Nhập số tiền bạn muốn ghi nhận",
    "withdraw": "Nhập số tiền bạn muốn rút (từ tài khoản sang tiền mặt)",
    "deposit": "Nhập số tiền bạn muốn nạp (từ tiền mặt sang tài khoản)",
}
INVALID_AMOUNT_REPROMPT = "⚠️ Số tiền không hợp lệ, vui lòng nhập lại (ví dụ: 100k)"
ACCOUNT_PROMPT = "Tiền thuộc nguồn nào? Nhập `tm` (tiền mặt) hoặc `tk` (tài khoản)"
INVALID_ACCOUNT_REPROMPT = "⚠️ Nguồn tiền không hợp lệ. Vui lòng nhập `tm` hoặc `tk`."
REASON_PROMPT = "Nhập lý do thu/chi"
TRANSFER_REASON_PROMPT = "Nhập lý do (có thể nhập `bo qua` nếu không có)"
MISSING_REASON_REPROMPT = "⚠️ Vui lòng nhập lý do cho khoản thu/chi."

INLINE_INVALID_AMOUNT = {
    "thu": "⚠️ Số tiền không hợp lệ. Ví dụ: /thu 100k tm lương",
    "chi": "⚠️ Số tiền không hợp lệ. Ví dụ: /chi 50k tm ăn trưa",
    "rut": "⚠️ Số tiền không hợp lệ. Ví dụ: /rut 500k rút ATM",
    "nap": "⚠️ Số tiền không hợp lệ. Ví dụ: /nap 500k nạp vào tài khoản",
}
INLINE_MISSING_REASON = {
    "thu": "⚠️ Vui lòng nhập lý do. Ví dụ: /thu 100k tk bán đồ cũ",
    "chi": "⚠️ Vui lòng nhập lý do. Ví dụ: /chi 50k tk cafe",
}

HELP_TEXT = textwrap.dedent(
    """\
    📘 HƯỚNG DẪN SỬ DỤNG MONEY BUDDY
    -------------------
    Bạn có thể dùng 2 cách:

    1) Cách hội thoại
    - /thu, /chi, /rut, /nap
    Bot sẽ hỏi từng bước để nhập.

    2) Cách nhập 1 dòng
    - /thu <số_tiền> [tm|tk] <lý_do>
      Ví dụ: /thu 100k tm lương tháng
    - /chi <số_tiền> [tm|tk] <lý_do>
      Ví dụ: /chi 50k tk ăn trưa
    - /rut <số_tiền> [lý_do]
      Ví dụ: /rut 500k rút ATM
    - /nap <số_tiền> [lý_do]
      Ví dụ: /nap 300k nạp vào tài khoản

    Lệnh khác:
    - /thongke: xem thống kê tổng quát
    - /huy: hủy thao tác đang nhập

    Mẹo: bạn có thể bấm các nút ô vuông để thao tác nhanh, không cần gõ lệnh."""
)

BOT_COMMANDS: list[tuple[str, str]] = [
    ("start", "Mở menu thao tác nhanh"),
    ("menu", "Hiển thị menu nút bấm"),
    ("thu", "Bắt đầu ghi khoản thu"),
    ("chi", "Bắt đầu ghi khoản chi"),
    ("rut", "Bắt đầu ghi giao dịch rút tiền"),
    ("nap", "Bắt đầu ghi giao dịch nạp tiền"),
    ("thongke", "Xem thống kê tổng quát"),
    ("huy", "Hủy thao tác đang nhập"),
    ("help", "Xem hướng dẫn sử dụng bot"),
]


def format_saved_record(record: TransactionCreate) -> str:
    amount_text = format_money(record.amount)
    if record.type is TransactionType.INCOME:
        return f"✅ Đã ghi nhận thu {amount_text} ({account_label(record.account)})\nLý do: {record.reason}"
    if record.type is TransactionType.EXPENSE:
        return f"💸 Đã ghi nhận chi {amount_text} ({account_label(record.account)})\nLý do: {record.reason}"
    if record.direction is TransferDirection.BANK_TO_CASH:
        return f"🏧 Đã rút {amount_text} từ Tài khoản sang Tiền mặt"
    return f"🏦 Đã nạp {amount_text} từ Tiền mặt vào Tài khoản"


def _balance_lines(report: ReportSnapshot) -> list[str]:
    return [
        f"Tổng thu: {format_money(report.income)}",
        f"Tổng chi: {format_money(report.expense)}",
        f"Số dư tiền mặt: {format_money(report.cash_balance)}",
        f"Số dư tiền tài khoản: {format_money(report.bank_balance)}",
        f"Tổng số dư: {format_money(report.total_balance)}",
    ]


def format_overview(report: ReportSnapshot) -> str:
    lines = [
        "📈 THỐNG KÊ TỔNG QUÁT",
        "-------------------",
        f"Tổng giao dịch: {report.transaction_count}",
        *_balance_lines(report),
    ]
    return "\n".join(lines)


def format_summary(report: ReportSnapshot, title: str = "📊 THỐNG KÊ") -> str:
    if report.top_expenses:
        top_lines = [
            f"{index}. {format_money(item.amount)} - {item.reason or 'Không có lý do'} ({account_label(item.account)})"
            for index, item in enumerate(report.top_expenses, start=1)
        ]
    else:
        top_lines = ["- Chưa có khoản chi nào"]
    lines = [
        title,
        "-------------------",
        *_balance_lines(report),
        "",
        "Top 3 khoản chi lớn nhất:",
        *top_lines,
    ]
    return "\n".join(lines)


def daily_report_title(report_time: str) -> str:
    return f"📊 BÁO CÁO {report_time} HẰNG NGÀY"
