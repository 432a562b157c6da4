"""Deployment script rendering for generated contracts.

Four output shapes: a TypeScript script, a Python script, CLI commands and a
deployment config bundle. Network endpoints come from NETWORKS.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from genlayer_mcp.schemas import ConstructorArgSpec, DeploymentOptions, NetworkTarget, ScriptType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkInfo:
    rpc_url: str
    chain_id: int
    gas_limit: int
    gas_price: str


NETWORKS: dict[str, NetworkInfo] = {
    "localnet": NetworkInfo("http://localhost:4000", 1337, 1000000, "20000000000"),
    "studionet": NetworkInfo("https://studio.genlayer.com/api", 1337, 1500000, "25000000000"),
    "testnet_asimov": NetworkInfo("https://testnet.genlayer.com/api", 42, 2000000, "30000000000"),
}


def _is_numeric_type(arg_type: str) -> bool:
    if arg_type in ("number", "int", "integer", "bigint"):
        return True
    return arg_type.startswith(("u", "i")) and arg_type[1:].isdigit()


def render_arg(arg: ConstructorArgSpec, language: str) -> str:
    """Render a constructor argument as a source literal.

    Strings and unknown types are quoted, integer types pass through raw,
    booleans follow the target language's spelling.
    """
    if _is_numeric_type(arg.type):
        return arg.value
    if arg.type in ("bool", "boolean"):
        truthy = arg.value.strip().lower() in ("true", "1", "yes")
        if language == "python":
            return "True" if truthy else "False"
        return "true" if truthy else "false"
    return json.dumps(arg.value)


def _network_names(target: NetworkTarget) -> list[str]:
    if target == NetworkTarget.ALL_NETWORKS:
        return list(NETWORKS)
    return [target.value]


def _typescript_script(path: str, target: NetworkTarget, args: list[ConstructorArgSpec], opts: DeploymentOptions) -> str:
    networks = ",\n".join(
        f"    {name}: {{ rpcUrl: '{info.rpc_url}', chainId: {info.chain_id} }}"
        for name, info in NETWORKS.items()
    )
    targets = ", ".join(f"'{n}'" for n in _network_names(target))
    rendered_args = ", ".join(render_arg(a, "typescript") for a in args)

    lines = [
        "// GenLayer Contract Deployment Script (TypeScript)",
        "import { GenLayerClient } from '@genlayer/js';",
        "",
        "const networks = {",
        networks,
        "};",
        "",
        f"const targets: (keyof typeof networks)[] = [{targets}];",
        "",
        "async function deployTo(network: keyof typeof networks) {",
        "  const config = networks[network];",
        "  const client = new GenLayerClient({",
        "    rpcUrl: config.rpcUrl,",
        "    chainId: config.chainId,",
        "    privateKey: process.env.PRIVATE_KEY || 'your-private-key-here'",
        "  });",
        "",
        f"  console.log('Deploying contract: {path}');",
        "  console.log('Network:', network);",
        "",
        f"  const args = [{rendered_args}];",
        "  const result = await client.deployContract({",
        f"    contractPath: '{path}',",
        "    constructorArgs: args,",
        f"    gasLimit: {opts.gas_limit},",
        f"    waitForConfirmation: {'true' if opts.wait_for_confirmation else 'false'},",
        "  });",
        "",
        "  console.log('Contract Address:', result.contractAddress);",
        "  console.log('Transaction Hash:', result.transactionHash);",
    ]
    if opts.verify_deployment:
        lines += [
            "",
            "  const info = await client.getContract(result.contractAddress);",
            "  console.log('Contract verified:', info);",
        ]
    lines += [
        "  return result;",
        "}",
        "",
        "async function main() {",
        "  for (const network of targets) {",
        "    await deployTo(network);",
        "  }",
        "}",
        "",
        "main().catch((error) => {",
        "  console.error('Deployment failed:', error);",
        "  process.exit(1);",
        "});",
        "",
        "export default main;",
    ]
    return "\n".join(lines)


def _python_script(path: str, target: NetworkTarget, args: list[ConstructorArgSpec], opts: DeploymentOptions) -> str:
    networks = "\n".join(
        f"    '{name}': {{'rpc_url': '{info.rpc_url}', 'chain_id': {info.chain_id}}},"
        for name, info in NETWORKS.items()
    )
    targets = ", ".join(f"'{n}'" for n in _network_names(target))
    rendered_args = ", ".join(render_arg(a, "python") for a in args)

    lines = [
        "#!/usr/bin/env python3",
        '"""GenLayer Contract Deployment Script (Python)"""',
        "import asyncio",
        "import os",
        "",
        "from genlayer import Account, GenLayerClient",
        "",
        "NETWORKS = {",
        networks,
        "}",
        f"TARGETS = [{targets}]",
        "",
        "",
        "async def deploy_contract(network: str):",
        "    config = NETWORKS[network]",
        f'    print("Deploying contract: {path}")',
        '    print(f"Network: {network}")',
        "",
        "    client = GenLayerClient(rpc_url=config['rpc_url'])",
        "    account = Account.from_private_key(os.getenv('PRIVATE_KEY', 'your-private-key-here'))",
        "",
        f"    args = [{rendered_args}]",
        f"    with open('{path}') as f:",
        "        contract_code = f.read()",
        "",
        "    result = await client.deploy_contract(",
        "        contract_code=contract_code,",
        "        constructor_args=args,",
        "        account=account,",
        f"        gas_limit={opts.gas_limit},",
        f"        wait_for_confirmation={opts.wait_for_confirmation},",
        "    )",
        "    print(f\"Contract Address: {result['contract_address']}\")",
        "    print(f\"Transaction Hash: {result['transaction_hash']}\")",
    ]
    if opts.verify_deployment:
        lines += [
            "",
            "    info = await client.get_contract(result['contract_address'])",
            '    print(f"Contract verified: {info}")',
        ]
    lines += [
        "    return result",
        "",
        "",
        "async def main():",
        "    for network in TARGETS:",
        "        await deploy_contract(network)",
        "",
        "",
        'if __name__ == "__main__":',
        "    asyncio.run(main())",
    ]
    return "\n".join(lines)


def _cli_commands(path: str, target: NetworkTarget, args: list[ConstructorArgSpec], opts: DeploymentOptions) -> str:
    arg_flags = ""
    if args:
        arg_flags = " --args " + " ".join(json.dumps(a.value) for a in args)

    lines = ["# GenLayer CLI Deployment Commands", "", "## Deploy", "```bash"]
    for name in _network_names(target):
        flags = [
            f"genlayer deploy --contract {path}",
            f"  --network {name.replace('_', '-')}",
            f"  --gas-limit {opts.gas_limit}",
        ]
        if arg_flags:
            flags.insert(1, " " + arg_flags)
        if opts.wait_for_confirmation:
            flags.append("  --wait-for-confirmation")
        flags.append("  --verify-deployment" if opts.verify_deployment else "  --no-verify")
        lines.append(" \\\n".join(flags))
        lines.append("")
    lines += [
        "```",
        "",
        "## Verify",
        "```bash",
        "genlayer tx status <transaction_hash>",
        "genlayer contract info <contract_address>",
        "```",
    ]
    return "\n".join(lines)


def _deploy_config(path: str, target: NetworkTarget, args: list[ConstructorArgSpec], opts: DeploymentOptions) -> str:
    config = {
        "networks": {
            name.replace("_", "-"): {
                "rpcUrl": info.rpc_url,
                "chainId": info.chain_id,
                "gasLimit": info.gas_limit,
                "gasPrice": info.gas_price,
            }
            for name, info in NETWORKS.items()
            if name in _network_names(target)
        },
        "contracts": {
            path: {
                "constructorArgs": [a.model_dump(exclude_defaults=True) for a in args],
                "deploymentOptions": {
                    "gasLimit": opts.gas_limit,
                    "waitForConfirmation": opts.wait_for_confirmation,
                    "verifyDeployment": opts.verify_deployment,
                },
            },
        },
    }
    first = NETWORKS[_network_names(target)[0]]
    env_lines = [
        f"GENLAYER_NETWORK={target.value}",
        f"GENLAYER_RPC_URL={first.rpc_url}",
        "PRIVATE_KEY=your_private_key_here",
        f"GAS_LIMIT={opts.gas_limit}",
        f"WAIT_FOR_CONFIRMATION={str(opts.wait_for_confirmation).lower()}",
        f"VERIFY_DEPLOYMENT={str(opts.verify_deployment).lower()}",
    ]
    return "\n".join([
        "# GenLayer Deployment Configuration",
        "",
        "## deployment.config.json",
        "```json",
        json.dumps(config, indent=2),
        "```",
        "",
        "## .env",
        "```bash",
        *env_lines,
        "```",
    ])


RENDERERS = {
    ScriptType.TYPESCRIPT: _typescript_script,
    ScriptType.PYTHON: _python_script,
    ScriptType.CLI_COMMAND: _cli_commands,
    ScriptType.DEPLOY_CONFIG: _deploy_config,
}


def render_deployment_script(
    script_type: ScriptType,
    contract_path: str,
    network_target: NetworkTarget = NetworkTarget.LOCALNET,
    constructor_args: list[ConstructorArgSpec] | None = None,
    options: DeploymentOptions | None = None,
) -> str:
    """Render one deployment artifact. ``all_networks`` deploys to every entry in NETWORKS."""
    args = constructor_args or []
    opts = options or DeploymentOptions()
    logger.debug("Rendering %s deployment for %s on %s", script_type, contract_path, network_target)
    return RENDERERS[script_type](contract_path, network_target, args, opts)
