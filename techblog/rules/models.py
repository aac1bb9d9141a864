from pydantic import BaseModel, Field


class RangeRule(BaseModel):
    min: int
    max: int


class PostRules(BaseModel):
    public_page_size: int = 10
    admin_page_size: int = 20
    slug_max_length: int = 191
    slug_conflict_retries: int = 3


class CommentRules(BaseModel):
    max_length: int = 1000
    cooldown_seconds: int = 10


class RegistrationRules(BaseModel):
    password: RangeRule = Field(default_factory=lambda: RangeRule(min=8, max=100))
    email_max_length: int = 191
    name_max_length: int = 50


class AuthRules(BaseModel):
    token_ttl_minutes: int = 60 * 24
    cookie_name: str = "access_token"
    algorithm: str = "HS256"


class NavigationRules(BaseModel):
    admin_prefix: str = "/admin"
    login_path: str = "/login"
    home_path: str = "/"
    session_wait_seconds: float = 5.0


class Rules(BaseModel):
    posts: PostRules = Field(default_factory=PostRules)
    comments: CommentRules = Field(default_factory=CommentRules)
    registration: RegistrationRules = Field(default_factory=RegistrationRules)
    auth: AuthRules = Field(default_factory=AuthRules)
    navigation: NavigationRules = Field(default_factory=NavigationRules)
