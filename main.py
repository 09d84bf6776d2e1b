"""
GridPilot X: Weather Acquisition

Fetches today's 24-hour weather observation for the Agra node through the
provider chain and prints it (optionally saving JSON for the simulator).

Chain: WeatherAPI.com (if keyed) -> Open-Meteo -> Offline Synthesis
Scan:  --scan IMAGE digitises a forecast chart with Claude vision instead

RELIABILITY IS KING - the simulator always gets 24 usable hours.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

from colorama import Fore, Style, init
from dotenv import load_dotenv

from gridpilot.chain import fetch_hourly_weather
from gridpilot.config import Settings
from gridpilot.vision import load_image, parse_weather_graph

# Load environment variables
load_dotenv()

# Ensure logs directory exists
os.makedirs("logs", exist_ok=True)

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler("logs/gridpilot.log", mode='a', encoding='utf-8'),
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

init()


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='GridPilot X - hourly weather acquisition for the Agra microgrid node'
    )
    parser.add_argument('--offline', action='store_true',
                        help='Skip live providers and use the offline climate table')
    parser.add_argument('--day-offset', type=int, default=0,
                        help='Climate profile day (0-9) used by the offline fallback')
    parser.add_argument('--output', type=Path,
                        help='Write the observation as JSON to this path')
    parser.add_argument('--scan', type=Path, metavar='IMAGE',
                        help='Digitise a weather graph image instead of fetching')
    return parser.parse_args(argv)


def print_banner():
    """Print the system banner."""
    print(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}   GRIDPILOT X: WEATHER ACQUISITION{Style.RESET_ALL}")
    print(f"{Fore.CYAN}   Agra Node - 24h Canonical Observation{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.WHITE}   [CHAIN] WeatherAPI.com (keyed) > Open-Meteo > Offline Synthesis{Style.RESET_ALL}")
    print()


def print_hourly_table(data: dict):
    """Print the three hourly arrays side by side."""
    print(f"   {'Hour':>4}  {'Temp C':>7}  {'RH %':>6}  {'Cloud %':>7}")
    print(f"   {'-' * 4}  {'-' * 7}  {'-' * 6}  {'-' * 7}")
    for h, (t, rh, c) in enumerate(zip(data["hourly_temp"], data["hourly_humidity"], data["hourly_cloud"])):
        print(f"   {h:>4}  {t:>7.1f}  {rh:>6.1f}  {c:>7.1f}")
    print()


def print_observation(observation: dict):
    meta = observation["meta"]
    if meta["is_fallback"]:
        label = f"{Fore.YELLOW}FALLBACK{Style.RESET_ALL}"
    else:
        label = f"{Fore.GREEN}LIVE{Style.RESET_ALL}"

    print(f"   Source:  {meta['source']} [{label}]")
    print(f"   Date:    {meta['date']} (updated {meta['last_updated']})")
    print(f"   Sun:     rise {observation['sunrise_hour']:.2f}h / set {observation['sunset_hour']:.2f}h")
    if observation.get("error"):
        print(f"   {Fore.RED}Last error:{Style.RESET_ALL} {observation['error']}")
    print()
    print_hourly_table(observation)


async def run(args) -> dict:
    settings = Settings.from_env()

    if args.scan:
        print(f"{Fore.YELLOW}[SCAN]{Style.RESET_ALL} Digitising {args.scan}...")
        image, media_type = load_image(args.scan)
        scanned = await parse_weather_graph(image, media_type, settings=settings)
        print_hourly_table(scanned)
        return scanned

    if args.offline:
        settings = replace(settings, offline=True)

    print(f"{Fore.YELLOW}[FETCH]{Style.RESET_ALL} Running provider chain...")
    observation = await fetch_hourly_weather(settings, day_offset=args.day_offset)
    print_observation(observation)
    return observation


def main(argv=None) -> int:
    args = parse_args(argv)
    print_banner()

    try:
        data = asyncio.run(run(args))
    except OSError as e:
        # Only --scan can get here (unreadable image file)
        logger.error(f"[main] {e}")
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {e}")
        return 1

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.info(f"[main] Saved to {args.output.absolute()}")
        print(f"{Fore.GREEN}Saved:{Style.RESET_ALL} {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
