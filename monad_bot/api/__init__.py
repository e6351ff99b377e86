from .base_client import BaseAPIClient
from .captcha import CaptchaSolver, TwoCaptchaSolver, AntiCaptchaSolver, get_captcha_solver
from .services import IpifyClient, MonorailClient, AprioriClient, check_proxy
