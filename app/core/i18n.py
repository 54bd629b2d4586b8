"""Message catalogs and request locale resolution (en, hi, bn)."""

from fastapi import Request

from app.core.config import settings

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "InvalidCredentials": "Invalid username/email or password.",
        "UserAlreadyExists": "A user with this username or email already exists.",
        "InvalidRefreshToken": "Invalid or expired refresh token.",
        "EmailAlreadyExists": "Email already exists.",
        "UsernameAlreadyExists": "Username already exists.",
        "RoleAlreadyExists": "Role already exists.",
        "UserNotFound": "User not found.",
        "RoleNotFound": "Role not found.",
        "NotFound": "Not found.",
        "Conflict": "The resource already exists.",
        "Forbidden": "You do not have permission to perform this action.",
        "NotAuthenticated": "Not authenticated.",
        "InvalidToken": "Invalid or expired token.",
        "InvalidPasswordLength": "Password must be between 8 and 128 characters.",
        "InvalidUsernameLength": "Username must be between 1 and 255 characters.",
        "LoginError": "An error occurred during login. Please try again.",
        "InvalidAntiForgeryToken": "The form has expired. Please try again.",
        "LoginTitle": "Sign in",
        "UsernameOrEmail": "Username or Email",
        "Password": "Password",
        "AutoCreate": "Create account if user doesn't exist",
        "SignIn": "Sign in",
        "SignOut": "Sign out",
        "Dashboard": "Dashboard",
        "Welcome": "Welcome",
        "Users": "Users",
        "Roles": "Roles",
        "Username": "Username",
        "Email": "Email",
        "Name": "Name",
        "Description": "Description",
    },
    "hi": {
        "InvalidCredentials": "अमान्य उपयोगकर्ता नाम/ईमेल या पासवर्ड।",
        "UserAlreadyExists": "इस उपयोगकर्ता नाम या ईमेल वाला उपयोगकर्ता पहले से मौजूद है।",
        "InvalidRefreshToken": "अमान्य या समाप्त रिफ्रेश टोकन।",
        "EmailAlreadyExists": "ईमेल पहले से मौजूद है।",
        "UsernameAlreadyExists": "उपयोगकर्ता नाम पहले से मौजूद है।",
        "RoleAlreadyExists": "भूमिका पहले से मौजूद है।",
        "UserNotFound": "उपयोगकर्ता नहीं मिला।",
        "RoleNotFound": "भूमिका नहीं मिली।",
        "NotFound": "नहीं मिला।",
        "Conflict": "संसाधन पहले से मौजूद है।",
        "Forbidden": "आपको यह कार्य करने की अनुमति नहीं है।",
        "NotAuthenticated": "प्रमाणित नहीं।",
        "InvalidToken": "अमान्य या समाप्त टोकन।",
        "InvalidPasswordLength": "पासवर्ड 8 से 128 अक्षरों के बीच होना चाहिए।",
        "InvalidUsernameLength": "उपयोगकर्ता नाम 1 से 255 अक्षरों के बीच होना चाहिए।",
        "LoginError": "लॉगिन के दौरान एक त्रुटि हुई। कृपया पुनः प्रयास करें।",
        "InvalidAntiForgeryToken": "फ़ॉर्म की अवधि समाप्त हो गई है। कृपया पुनः प्रयास करें।",
        "LoginTitle": "साइन इन करें",
        "UsernameOrEmail": "उपयोगकर्ता नाम या ईमेल",
        "Password": "पासवर्ड",
        "AutoCreate": "यदि उपयोगकर्ता मौजूद नहीं है तो खाता बनाएं",
        "SignIn": "साइन इन करें",
        "SignOut": "साइन आउट करें",
        "Dashboard": "डैशबोर्ड",
        "Welcome": "स्वागत है",
        "Users": "उपयोगकर्ता",
        "Roles": "भूमिकाएँ",
        "Username": "उपयोगकर्ता नाम",
        "Email": "ईमेल",
        "Name": "नाम",
        "Description": "विवरण",
    },
    "bn": {
        "InvalidCredentials": "অবৈধ ব্যবহারকারীর নাম/ইমেল বা পাসওয়ার্ড।",
        "UserAlreadyExists": "এই ব্যবহারকারীর নাম বা ইমেল সহ একজন ব্যবহারকারী ইতিমধ্যে বিদ্যমান।",
        "InvalidRefreshToken": "অবৈধ বা মেয়াদোত্তীর্ণ রিফ্রেশ টোকেন।",
        "EmailAlreadyExists": "ইমেল ইতিমধ্যে বিদ্যমান।",
        "UsernameAlreadyExists": "ব্যবহারকারীর নাম ইতিমধ্যে বিদ্যমান।",
        "RoleAlreadyExists": "ভূমিকা ইতিমধ্যে বিদ্যমান।",
        "UserNotFound": "ব্যবহারকারী পাওয়া যায়নি।",
        "RoleNotFound": "ভূমিকা পাওয়া যায়নি।",
        "NotFound": "পাওয়া যায়নি।",
        "Conflict": "রিসোর্সটি ইতিমধ্যে বিদ্যমান।",
        "Forbidden": "এই কাজটি করার অনুমতি আপনার নেই।",
        "NotAuthenticated": "প্রমাণীকৃত নয়।",
        "InvalidToken": "অবৈধ বা মেয়াদোত্তীর্ণ টোকেন।",
        "InvalidPasswordLength": "পাসওয়ার্ড ৮ থেকে ১২৮ অক্ষরের মধ্যে হতে হবে।",
        "InvalidUsernameLength": "ব্যবহারকারীর নাম ১ থেকে ২৫৫ অক্ষরের মধ্যে হতে হবে।",
        "LoginError": "লগইন করার সময় একটি ত্রুটি ঘটেছে। অনুগ্রহ করে আবার চেষ্টা করুন।",
        "InvalidAntiForgeryToken": "ফর্মের মেয়াদ শেষ হয়ে গেছে। অনুগ্রহ করে আবার চেষ্টা করুন।",
        "LoginTitle": "সাইন ইন",
        "UsernameOrEmail": "ব্যবহারকারীর নাম বা ইমেল",
        "Password": "পাসওয়ার্ড",
        "AutoCreate": "ব্যবহারকারী না থাকলে অ্যাকাউন্ট তৈরি করুন",
        "SignIn": "সাইন ইন",
        "SignOut": "সাইন আউট",
        "Dashboard": "ড্যাশবোর্ড",
        "Welcome": "স্বাগতম",
        "Users": "ব্যবহারকারী",
        "Roles": "ভূমিকা",
        "Username": "ব্যবহারকারীর নাম",
        "Email": "ইমেল",
        "Name": "নাম",
        "Description": "বিবরণ",
    },
}

FALLBACK_LOCALE = "en"


def translate(key: str, locale: str | None = None) -> str:
    """Look up key in locale, then English, then return the key itself."""
    catalog = MESSAGES.get(locale or settings.DEFAULT_LOCALE, {})
    if key in catalog:
        return catalog[key]
    return MESSAGES[FALLBACK_LOCALE].get(key, key)


def parse_accept_language(header: str | None) -> list[str]:
    """
    Return language tags from an Accept-Language header, highest quality first.
    Region subtags are dropped ("hi-IN" -> "hi").
    """
    if not header:
        return []
    weighted: list[tuple[float, int, str]] = []
    for index, part in enumerate(header.split(",")):
        pieces = part.strip().split(";")
        tag = pieces[0].strip().lower()
        if not tag or tag == "*":
            continue
        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.strip().partition("=")
            if name.strip() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality <= 0:
            continue
        weighted.append((-quality, index, tag.split("-")[0]))
    weighted.sort()
    return [tag for _, _, tag in weighted]


def resolve_locale(query_lang: str | None, accept_language: str | None) -> str:
    """Pick the request locale: explicit ?lang=, then Accept-Language, then default."""
    supported = settings.SUPPORTED_LOCALES
    if query_lang:
        lang = query_lang.strip().lower().split("-")[0]
        if lang in supported:
            return lang
    for tag in parse_accept_language(accept_language):
        if tag in supported:
            return tag
    return settings.DEFAULT_LOCALE


def get_locale(request: Request) -> str:
    """Dependency: locale for the current request."""
    return resolve_locale(
        request.query_params.get("lang"),
        request.headers.get("accept-language"),
    )
