"""Static metadata for the networks the funder knows about."""

from typing import Dict, List

from gas_funder.core.exceptions.base import UnknownNetworkError
from .models import NetworkInfo


NETWORKS: Dict[str, NetworkInfo] = {
    network.name: network
    for network in (
        # Mainnets
        NetworkInfo(name="eth-mainnet", chain_id=1, native_token_symbol="ETH", human_readable_name="Ethereum"),
        NetworkInfo(name="polygon-mainnet", chain_id=137, native_token_symbol="POL", human_readable_name="Polygon"),
        NetworkInfo(name="xdai-mainnet", chain_id=100, native_token_symbol="xDAI", human_readable_name="Gnosis Chain"),
        NetworkInfo(name="optimism-mainnet", chain_id=10, native_token_symbol="ETH", human_readable_name="Optimism"),
        NetworkInfo(name="arbitrum-one", chain_id=42161, native_token_symbol="ETH", human_readable_name="Arbitrum One"),
        NetworkInfo(name="avalanche-c", chain_id=43114, native_token_symbol="AVAX", human_readable_name="Avalanche C-Chain"),
        NetworkInfo(name="bsc-mainnet", chain_id=56, native_token_symbol="BNB", human_readable_name="BNB Smart Chain"),
        NetworkInfo(name="celo-mainnet", chain_id=42220, native_token_symbol="CELO", human_readable_name="Celo"),
        NetworkInfo(name="base-mainnet", chain_id=8453, native_token_symbol="ETH", human_readable_name="Base"),
        NetworkInfo(name="scroll-mainnet", chain_id=534352, native_token_symbol="ETH", human_readable_name="Scroll"),
        NetworkInfo(name="degenchain", chain_id=666666666, native_token_symbol="DEGEN", human_readable_name="Degen Chain"),
        # Testnets
        NetworkInfo(name="eth-sepolia", chain_id=11155111, native_token_symbol="ETH", human_readable_name="Sepolia"),
        NetworkInfo(name="avalanche-fuji", chain_id=43113, native_token_symbol="AVAX", human_readable_name="Avalanche Fuji"),
        NetworkInfo(name="optimism-sepolia", chain_id=11155420, native_token_symbol="ETH", human_readable_name="Optimism Sepolia"),
        NetworkInfo(name="base-sepolia", chain_id=84532, native_token_symbol="ETH", human_readable_name="Base Sepolia"),
        NetworkInfo(name="scroll-sepolia", chain_id=534351, native_token_symbol="ETH", human_readable_name="Scroll Sepolia"),
        NetworkInfo(name="bsc-chapel", chain_id=97, native_token_symbol="tBNB", human_readable_name="BSC Testnet"),
    )
}


def get_network_by_name(name: str) -> NetworkInfo:
    """
    Look up a network by its canonical name.

    Raises:
        UnknownNetworkError: If the name is not registered
    """
    network = NETWORKS.get(name)
    if network is None:
        raise UnknownNetworkError(name, details={"known_networks": list_network_names()})
    return network


def list_network_names() -> List[str]:
    return sorted(NETWORKS)
