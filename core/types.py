"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 str Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum, IntEnum


class Network(str, Enum):
    """비트코인 네트워크"""

    MAINNET = "mainnet"
    TESTNET = "testnet"
    SIGNET = "signet"
    REGTEST = "regtest"


class PaymentCategory(str, Enum):
    """listtransactions 항목의 category"""

    SEND = "send"
    RECEIVE = "receive"
    GENERATE = "generate"  # 채굴 보상 (성숙)
    IMMATURE = "immature"  # 채굴 보상 (미성숙)
    ORPHAN = "orphan"


class Ecosystem(str, Enum):
    """Omni 생태계 (실거래 / 테스트)"""

    MAIN = "main"
    TEST = "test"


class TokenTxType(IntEnum):
    """Omni 트랜잭션 타입 코드 (type_int)"""

    SIMPLE_SEND = 0
    SEND_ALL = 4
    METADEX_TRADE = 25
    METADEX_CANCEL_PRICE = 26
    METADEX_CANCEL_PAIR = 27
    METADEX_CANCEL_ECOSYSTEM = 28
    CREATE_PROPERTY_FIXED = 50
    CREATE_PROPERTY_VARIABLE = 51
    CREATE_PROPERTY_MANUAL = 54
    GRANT_PROPERTY_TOKENS = 55
    REVOKE_PROPERTY_TOKENS = 56

    @classmethod
    def from_code(cls, code: int) -> "TokenTxType | None":
        """타입 코드 → Enum (알 수 없는 코드면 None)"""
        try:
            return cls(code)
        except ValueError:
            return None


# Omni 속성(property) ID
BTC_PROPERTY_ID: int = 0
OMNI_PROPERTY_ID: int = 1
TOMNI_PROPERTY_ID: int = 2
# 이 값 이상의 property ID는 테스트 생태계 소속
TEST_ECOSYSTEM_FIRST_ID: int = 2147483651

# 잘 알려진 property ID → 티커
KNOWN_TICKERS: dict[int, str] = {
    BTC_PROPERTY_ID: "BTC",
    OMNI_PROPERTY_ID: "OMNI",
    TOMNI_PROPERTY_ID: "TOMNI",
    3: "MAID",
    31: "USDT",
}

# 알 수 없는 property의 통화 코드 접두어 (예: OMNI_SPT#57)
SPT_CODE_PREFIX: str = "OMNI_SPT#"


def ecosystem_of(property_id: int) -> Ecosystem:
    """property ID가 속한 생태계

    TOMNI(2)와 2147483651 이상은 테스트 생태계.
    """
    if property_id == TOMNI_PROPERTY_ID or property_id >= TEST_ECOSYSTEM_FIRST_ID:
        return Ecosystem.TEST
    return Ecosystem.MAIN


def property_id_to_code(property_id: int) -> str:
    """property ID → 원시 통화 코드

    Examples:
        >>> property_id_to_code(31)
        'USDT'
        >>> property_id_to_code(57)
        'OMNI_SPT#57'
    """
    ticker = KNOWN_TICKERS.get(property_id)
    if ticker is not None:
        return ticker
    return f"{SPT_CODE_PREFIX}{property_id}"
