"""
JSON-RPC 에러 정의

원격 호출 실패를 전송 실패와 서버 응답 에러로 구분.
"""


class WalletRpcError(Exception):
    """지갑 RPC 호출 실패 (공통 베이스)"""

    pass


class RpcTransportError(WalletRpcError):
    """전송 계층 실패

    연결 실패, 타임아웃, 재시도 소진, 해석 불가능한 HTTP 응답 시 발생.
    """

    def __init__(self, method: str, message: str):
        self.method = method
        self.message = message
        super().__init__(f"RPC transport error [{method}]: {message}")


class RpcResponseError(WalletRpcError):
    """JSON-RPC 에러 응답

    서버가 error 객체를 반환했을 때 발생 (재시도하지 않음).
    """

    # JSON-RPC 표준 / bitcoind 에러 코드
    METHOD_NOT_FOUND = -32601
    INVALID_ADDRESS_OR_KEY = -5

    def __init__(self, method: str, code: int, message: str):
        self.method = method
        self.code = code
        self.message = message
        super().__init__(f"RPC error [{method}] [{code}]: {message}")

    @property
    def is_method_not_found(self) -> bool:
        """지원하지 않는 메서드 호출 여부"""
        return self.code == self.METHOD_NOT_FOUND


class RpcDecodeError(WalletRpcError):
    """응답 해석 실패

    result는 받았지만 필수 필드 누락, 잘못된 숫자 등으로 모델 변환에 실패한 경우.
    """

    def __init__(self, method: str, message: str):
        self.method = method
        self.message = message
        super().__init__(f"RPC decode error [{method}]: {message}")
