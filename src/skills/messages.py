"""사용자 노출 문구 (페르시아어)

검증 에러와 알림 제목/본문을 한곳에 모아둔다.
"""

from __future__ import annotations

# 필드 검증
KEYBOARD_LAYOUT = "زبان کیبورد شما فارسی است. لطفا آن را تغییر دهید"
NATIONAL_ID_LENGTH = "کد ملی باید دقیقا ۱۰ رقم باشد و فقط شامل اعداد باشد"
NATIONAL_ID_INVALID = "کد ملی وارد شده معتبر نیست"
NATIONAL_ID_DUPLICATE = "این کد ملی قبلاً برای مسافر صندلی {seat_no} استفاده شده است"

NAME_EMPTY = "{label} نمی‌تواند خالی باشد"
NAME_TOO_LONG = "{label} نمی‌تواند بیش از ۱۴ کاراکتر باشد"
NAME_NOT_PERSIAN = "{label} باید به فارسی باشد"
NAME_LABELS = {"name": "نام", "family": "نام خانوادگی"}

PHONE_INVALID = "شماره موبایل باید ۱۱ رقم باشد"
EMAIL_INVALID = "لطفا یک ایمیل معتبر وارد کنید"

BIRTH_DATE_INCOMPLETE = "لطفا تاریخ تولد را کامل وارد کنید"
BIRTH_YEAR_INVALID = "سال تولد باید ۴ رقم باشد"
BIRTH_MONTH_INVALID = "ماه تولد باید بین ۱ تا ۱۲ باشد"
BIRTH_DAY_INVALID = "روز تولد باید بین ۱ تا ۳۱ باشد"

# 알림 (제목, 본문)
SAVE_FAILED = ("خطا در ذخیره اطلاعات", "مشکلی در ذخیره اطلاعات مسافران رخ داد. لطفا دوباره تلاش کنید")
SAVE_SUCCEEDED = ("اطلاعات مسافران ذخیره شد", "در حال انتقال به صفحه بعدی...")
NO_PASSENGERS = ("خطا", "لطفا حداقل یک مسافر اضافه کنید")
LOGIN_REQUIRED = ("خطا", "لطفا وارد حساب کاربری خود شوید")
SERVICE_MISSING = ("خطا", "اطلاعات سرویس یافت نشد")
PAYMENT_FAILED = ("خطا در پرداخت", "متأسفانه مشکلی در پردازش پرداخت به وجود آمد")
ORDER_FAILED = ("خطا در ایجاد سفارش", "متأسفانه مشکلی در ایجاد سفارش به وجود آمد")
WALLET_PAID = ("پرداخت موفق", "پرداخت با کیف پول با موفقیت انجام شد")
REDIRECTING = ("انتقال به درگاه پرداخت", "در حال انتقال به درگاه پرداخت...")
RESERVATION_EXPIRED = ("زمان رزرو به پایان رسید", "زمان رزرو صندلی‌ها به پایان رسید. لطفا دوباره صندلی انتخاب کنید")
INCOMPLETE_PASSENGERS = ("اطلاعات ناقص", "لطفاً همه فیلدهای اجباری را پر کنید")
DUPLICATE_NATIONAL_IDS = ("کد ملی تکراری", "لطفاً کد ملی تکراری را اصلاح کنید. هر مسافر باید کد ملی منحصر به فرد داشته باشد.")

_PERSIAN_DIGITS = "۰۱۲۳۴۵۶۷۸۹"
_ARABIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
_TO_ASCII = str.maketrans(
    _PERSIAN_DIGITS + _ARABIC_DIGITS, "0123456789" * 2,
)
_TO_PERSIAN = str.maketrans("0123456789", _PERSIAN_DIGITS)


def to_ascii_digits(text: str) -> str:
    """페르시아/아랍 숫자 → ASCII 숫자"""
    return text.translate(_TO_ASCII)


def to_persian_digits(text: str) -> str:
    """ASCII 숫자 → 페르시아 숫자"""
    return text.translate(_TO_PERSIAN)
