from .deploy import DeployModule
from .send import SendModule
from .faucet import FaucetModule
from .wrap import RubicModule, IzumiModule
from .stake import MagmaModule, AprioriModule, KintsuModule
from .beanswap import BeanswapModule
from .monorail import MonorailModule
from .ambient import AmbientModule
from .uniswap import UniswapModule
