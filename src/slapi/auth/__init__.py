from slapi.auth.protocol import ApiKeyCredentials, CredentialsProvider

__all__ = ["ApiKeyCredentials", "CredentialsProvider"]
