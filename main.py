"""
================================================================================
Amazon Product Scraper
================================================================================
Author      : Breno Farias da Silva
Created     : <2026-10-18>
Description :
    This script scrapes Amazon search-result pages and product-detail pages
    with a headless browser and appends flat records to a JSON Lines dataset.
    It builds the list of pages to visit from an input JSON file, renders the
    pages with a pool of browser workers and extracts a fixed set of fields
    from each page.

    Key features include:
        - Search mode (keywords x result pages) and product URL mode
        - Bounded pool of concurrent browser workers
        - Retries for pages that fail to load, with a failed-requests dataset
        - Per-page error records that never abort the run
        - CSV export of the dataset at the end of the run
        - Logging to both terminal and ./Logs/

Usage:
    1. Optionally configure the .env file (HEADLESS, CHROME_EXECUTABLE_PATH, INPUT_FILE).
    2. Write the input configuration to ./Inputs/input.json, e.g.:
            {"mode": "search", "keywords": ["shoes"], "maxPagesPerKeyword": 2}
    3. Run the script:
            $ python main.py
    4. Verify outputs in the ./Outputs/<runName>/ directory.

Outputs:
    - ./Outputs/<runName>/dataset.jsonl (search, product and error records)
    - ./Outputs/<runName>/dataset.csv
    - ./Outputs/<runName>/FAILED_REQUESTS.jsonl
    - Logs in ./Logs/ for execution details

TODOs:
    - Follow the "next page" link instead of building page URLs

Dependencies:
    - Python >= 3.8
    - playwright for browser automation
    - beautifulsoup4 for HTML parsing
    - pandas for the CSV export
    - colorama for terminal coloring
    - python-dotenv for environment variables
    - tqdm for the progress bar

Assumptions & Notes:
    - Websites' structures may change; updates may be needed for the selectors
    - Respect robots.txt and terms of service for ethical scraping
    - Record order between pages is not guaranteed
"""

import datetime  # For getting the current date and time
import json  # For reading the input configuration
import os  # For file and directory handling
import queue  # For the shared task queue of the worker pool
import sys  # For system-specific parameters and functions
import threading  # For the per-worker progress lock
from Amazon import Amazon, utc_timestamp  # Import the Amazon record extractor
from bs4 import BeautifulSoup  # For parsing rendered HTML
from Browser import Browser  # Import the headless browser renderer
from collections import Counter  # For counting task outcomes
from colorama import Style  # For coloring the terminal
from concurrent.futures import ThreadPoolExecutor  # For the bounded worker pool
from dataclasses import dataclass  # For the immutable task type
from dataset import Dataset  # Import the append-only dataset sink
from dotenv import load_dotenv  # For loading environment variables
from Logger import Logger  # For logging output to both terminal and file
from pathlib import Path  # For handling file paths
from product_utils import build_search_url  # Centralized search URL builder
from tqdm import tqdm  # Progress bar for task processing
from typing import Any, Callable, Dict, List, Optional  # For type hints


# Macros:
class BackgroundColors:  # Colors for the terminal
    CYAN = "\033[96m"  # Cyan
    GREEN = "\033[92m"  # Green
    YELLOW = "\033[93m"  # Yellow
    RED = "\033[91m"  # Red
    BOLD = "\033[1m"  # Bold
    UNDERLINE = "\033[4m"  # Underline
    CLEAR_TERMINAL = "\033[H\033[J"  # Clear the terminal


# Execution Constants:
VERBOSE = False  # Set to True to output verbose messages

MODES = ("search", "product_urls")  # Supported input modes

DEFAULT_CONFIGURATION = {
    "mode": "search",  # Scrape search result pages by default
    "marketplace": "com",  # Amazon.com by default
    "maxPagesPerKeyword": 1,  # Only the first results page per keyword
    "concurrency": 5,  # Number of browser workers
    "runName": "amazon-scrape",  # Output dataset directory name
    "maxRequestRetries": 3,  # Extra attempts for pages that fail to load
}  # Defaults for every optional input key

READINESS_SELECTORS = {
    "search": ("div.s-result-item", 7000),  # Result cards, waited up to 7 seconds
    "product": ("#productTitle, #title", 8000),  # Product title, waited up to 8 seconds
}  # Selector and timeout (ms) that signal a rendered page, per page type

# File Path Constants:
INPUT_DIRECTORY = "./Inputs/"  # The path to the input directory
INPUT_FILE = f"{INPUT_DIRECTORY}input.json"  # The path to the input configuration file
OUTPUT_DIRECTORY = "./Outputs/"  # The path to the output directory
DATASET_FILENAME = "dataset.jsonl"  # Records of a run
FAILED_REQUESTS_FILENAME = "FAILED_REQUESTS.jsonl"  # Requests that exhausted their retries
LOG_FILE = f"./Logs/{Path(__file__).stem}.log"  # The path to the log file

# Environment Variables:
ENV_PATH = "./.env"  # The path to the .env file


# Classes Definitions:


class ConfigurationError(ValueError):
    """
    Raised when the input configuration cannot start a run.
    """


@dataclass(frozen=True)
class ScrapeTask:
    """
    One page to render and extract.
    """

    url: str  # URL to render
    page_type: str  # "search" or "product"
    keyword: Optional[str] = None  # Search keyword (search pages only)
    page_number: Optional[int] = None  # Search results page number (search pages only)


# Functions Definitions:


def verbose_output(logger, true_string="", false_string=""):
    """
    Outputs a message through the logger if the VERBOSE constant is set to True.

    :param logger: Logger-like object with a write method
    :param true_string: The string to be outputted if the VERBOSE constant is set to True.
    :param false_string: The string to be outputted if the VERBOSE constant is set to False.
    :return: None
    """

    if VERBOSE and true_string != "":  # If VERBOSE is True and a true_string was provided
        logger.write(true_string)  # Output the true statement string
    elif false_string != "":  # If a false_string was provided
        logger.write(false_string)  # Output the false statement string


def verify_filepath_exists(filepath):
    """
    Verify if a file or folder exists at the specified path.

    :param filepath: Path to the file or folder
    :return: True if the file or folder exists, False otherwise
    """

    return os.path.exists(filepath)  # Return True if the file or folder exists, False otherwise


def load_input_file(input_file):
    """
    Reads the input configuration JSON file.

    :param input_file: Path to the JSON file
    :return: Dictionary with the raw input configuration
    """

    if not verify_filepath_exists(input_file):  # The input file is required
        raise ConfigurationError(f"Input file not found: {input_file}")

    try:  # Parse the configuration
        with open(input_file, "r", encoding="utf-8") as fh:  # Open the input file with UTF-8 encoding
            raw = json.load(fh)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Input file {input_file} is not valid JSON: {e}") from e

    if not isinstance(raw, dict):  # The configuration must be a JSON object
        raise ConfigurationError(f"Input file {input_file} must contain a JSON object.")

    return raw  # Return the raw configuration


def read_positive_integer(raw, key, minimum=1):
    """
    Reads an integer option from the raw configuration, applying its default.

    :param raw: Raw input configuration
    :param key: Option name
    :param minimum: Smallest accepted value
    :return: The integer value
    """

    value = raw.get(key)  # Read the option
    if value is None:  # Missing option uses the default
        return DEFAULT_CONFIGURATION[key]

    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:  # bool is an int subclass
        raise ConfigurationError(f"{key} must be an integer >= {minimum}, got {value!r}.")

    return value  # Return the validated value


def read_string_list(raw, key, mode):
    """
    Reads a required list of strings, dropping blank entries.

    :param raw: Raw input configuration
    :param key: Option name
    :param mode: Active mode, used in the error message
    :return: List of stripped, non-empty strings
    """

    values = raw.get(key)  # Read the option
    if not isinstance(values, list):  # Missing or not a list
        raise ConfigurationError(f"In {mode} mode you must provide a non-empty {key} array in the input.")

    cleaned = [v.strip() for v in values if isinstance(v, str) and v.strip()]  # Keep order, drop blanks
    if not cleaned:  # Nothing usable left
        raise ConfigurationError(f"In {mode} mode you must provide a non-empty {key} array in the input.")

    return cleaned  # Return the cleaned list


def load_configuration(raw):
    """
    Validates the raw input configuration and applies the defaults.

    :param raw: Raw input configuration dictionary
    :return: Normalized configuration dictionary
    """

    mode = raw.get("mode") or DEFAULT_CONFIGURATION["mode"]  # Resolve the mode
    if mode not in MODES:  # Unknown modes abort the run
        raise ConfigurationError(f"Unknown mode: {mode}")

    config = {
        "mode": mode,  # Store the mode
        "marketplace": raw.get("marketplace") or DEFAULT_CONFIGURATION["marketplace"],  # Store the marketplace
        "keywords": [],  # Filled in search mode
        "product_urls": [],  # Filled in product_urls mode
        "max_pages_per_keyword": read_positive_integer(raw, "maxPagesPerKeyword"),  # Store the page limit
        "concurrency": read_positive_integer(raw, "concurrency"),  # Store the worker count
        "run_name": raw.get("runName") or DEFAULT_CONFIGURATION["runName"],  # Store the run name
        "max_request_retries": read_positive_integer(raw, "maxRequestRetries", minimum=0),  # Store the retry budget
    }  # End of dictionary construction

    if mode == "search":  # Search mode needs keywords
        config["keywords"] = read_string_list(raw, "keywords", mode)
    else:  # Product URL mode needs product URLs
        config["product_urls"] = read_string_list(raw, "productUrls", mode)

    return config  # Return the normalized configuration


def build_scrape_tasks(config):
    """
    Builds the ordered list of tasks for a run.

    :param config: Normalized configuration dictionary
    :return: List of ScrapeTask
    """

    tasks: List[ScrapeTask] = []  # Initialize empty list for tasks

    if config["mode"] == "search":  # One task per keyword and page
        for keyword in config["keywords"]:  # Keep the keyword order
            for page in range(1, config["max_pages_per_keyword"] + 1):  # Pages start at 1
                url = build_search_url(keyword, config["marketplace"], page)  # Build the search URL
                tasks.append(ScrapeTask(url=url, page_type="search", keyword=keyword, page_number=page))
    else:  # One task per product URL, passed through unchanged
        for url in config["product_urls"]:  # Keep the input order
            tasks.append(ScrapeTask(url=url, page_type="product"))

    return tasks  # Return the task list


def extract_records(task, html, extractor):
    """
    Parses a rendered page and extracts its records according to the task page type.

    :param task: ScrapeTask the page was rendered for
    :param html: Rendered HTML string
    :param extractor: Amazon extractor instance
    :return: List of record dictionaries
    """

    soup = BeautifulSoup(html, "html.parser")  # Parse HTML content into BeautifulSoup object

    if task.page_type == "search":  # Many records per search page
        return extractor.extract_search_results(soup, keyword=task.keyword, page_number=task.page_number)

    return [extractor.extract_product_detail(soup, page_url=task.url)]  # Exactly one record per product page


def render_with_retries(task, renderer, logger, max_request_retries):
    """
    Renders the page of a task, retrying failed loads.

    :param task: ScrapeTask to render
    :param renderer: Object with a render(url, wait_selector, wait_timeout) method
    :param logger: Logger-like object with a write method
    :param max_request_retries: Extra attempts after the first failure
    :return: Tuple (html or None, list of error messages)
    """

    wait_selector, wait_timeout = READINESS_SELECTORS[task.page_type]  # Readiness selector for the page type
    errors: List[str] = []  # One message per failed attempt

    for attempt in range(1, max_request_retries + 2):  # First attempt plus retries
        try:  # Attempt to render the page
            return renderer.render(task.url, wait_selector=wait_selector, wait_timeout=wait_timeout), errors
        except Exception as e:  # Navigation errors and timeouts are retried
            errors.append(str(e))  # Keep the message for the failed-requests dataset
            verbose_output(logger, f"{BackgroundColors.YELLOW}Attempt {BackgroundColors.CYAN}{attempt}{BackgroundColors.YELLOW} failed for {BackgroundColors.CYAN}{task.url}{BackgroundColors.YELLOW}: {e}{Style.RESET_ALL}")

    return None, errors  # Every attempt failed


def process_task(task, renderer, extractor, dataset, failed_dataset, logger, max_request_retries):
    """
    Renders one task, extracts its records and appends them to the dataset.
    Extraction errors become an error record; load failures go to the failed-requests dataset.

    :param task: ScrapeTask to process
    :param renderer: Object with a render(url, wait_selector, wait_timeout) method
    :param extractor: Amazon extractor instance
    :param dataset: Dataset receiving the records
    :param failed_dataset: Dataset receiving the failed requests
    :param logger: Logger-like object with a write method
    :param max_request_retries: Extra attempts for pages that fail to load
    :return: Outcome string: "ok", "error" or "failed"
    """

    verbose_output(logger, f"{BackgroundColors.GREEN}Processing {BackgroundColors.CYAN}{task.page_type}{BackgroundColors.GREEN} page: {BackgroundColors.CYAN}{task.url}{Style.RESET_ALL}")

    html, errors = render_with_retries(task, renderer, logger, max_request_retries)  # Render the page
    if html is None:  # Retry budget exhausted
        logger.write(f"{BackgroundColors.RED}Request failed too many times: {BackgroundColors.CYAN}{task.url}{Style.RESET_ALL}")
        failed_dataset.push_data({"url": task.url, "errors": errors, "timestamp": utc_timestamp()})
        return "failed"

    try:  # Extraction errors are contained to this task
        records = extract_records(task, html, extractor)  # Extract the page records
        dataset.push_data(records)  # Append them to the dataset
    except Exception as e:  # Unexpected page structure or parser failure
        logger.write(f"{BackgroundColors.YELLOW}Error while processing page {BackgroundColors.CYAN}{task.url}{BackgroundColors.YELLOW}: {e}{Style.RESET_ALL}")
        dataset.push_data({"type": "error", "url": task.url, "error": str(e), "scraped_at": utc_timestamp()})
        return "error"

    verbose_output(logger, f"{BackgroundColors.GREEN}Extracted {BackgroundColors.CYAN}{len(records)}{BackgroundColors.GREEN} records from {BackgroundColors.CYAN}{task.url}{Style.RESET_ALL}")
    return "ok"  # Page processed


def run_scrape_tasks(tasks, renderer_factory: Callable[[], Any], extractor, dataset, failed_dataset, logger, concurrency=5, max_request_retries=3) -> Dict[str, int]:
    """
    Processes every task with a bounded pool of workers pulling from a shared queue.
    Each worker creates its own renderer and closes it when the queue is drained.

    :param tasks: List of ScrapeTask
    :param renderer_factory: Callable returning a new renderer with render and close_browser methods
    :param extractor: Amazon extractor instance
    :param dataset: Dataset receiving the records
    :param failed_dataset: Dataset receiving the failed requests
    :param logger: Logger-like object with a write method
    :param concurrency: Number of workers
    :param max_request_retries: Extra attempts for pages that fail to load
    :return: Dictionary counting the "ok", "error" and "failed" outcomes
    """

    task_queue: "queue.Queue[ScrapeTask]" = queue.Queue()  # Shared queue of pending tasks
    for task in tasks:  # Enqueue in input order
        task_queue.put(task)

    outcomes: Counter = Counter()  # Outcome counters across workers
    outcomes_lock = threading.Lock()  # Guard the counters and the progress bar

    pbar = tqdm(
        total=len(tasks),
        desc=f"{BackgroundColors.GREEN}Processing pages{Style.RESET_ALL}",
        unit="page",
        ncols=100,
        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]",
        file=sys.__stdout__,
        disable=None,  # Hide the bar when the output is not a terminal
    )

    def worker():
        renderer = renderer_factory()  # One renderer per worker thread
        try:
            while True:
                try:
                    task = task_queue.get_nowait()  # Take the next pending task
                except queue.Empty:  # Queue drained
                    return
                outcome = process_task(task, renderer, extractor, dataset, failed_dataset, logger, max_request_retries)
                with outcomes_lock:
                    outcomes[outcome] += 1
                    pbar.update(1)
        finally:
            renderer.close_browser()  # Closed on the thread that opened it

    worker_count = max(1, min(concurrency, len(tasks)))  # No idle browsers for short task lists
    try:
        with ThreadPoolExecutor(max_workers=worker_count) as executor:  # Bounded pool of workers
            futures = [executor.submit(worker) for _ in range(worker_count)]
            for future in futures:  # Surface renderer startup errors
                future.result()
    finally:
        pbar.close()

    return {key: outcomes.get(key, 0) for key in ("ok", "error", "failed")}  # Stable summary shape


def calculate_execution_time(start_time, finish_time):
    """
    Calculates the execution time and returns a human-readable string.

    :param start_time: Start datetime
    :param finish_time: Finish datetime
    :return: String like "1h 2m 3s"
    """

    total_seconds = abs((finish_time - start_time).total_seconds())  # Normalize negative durations

    hours = int(total_seconds // 3600)  # Compute full hours
    minutes = int((total_seconds % 3600) // 60)  # Compute remaining minutes
    seconds = int(total_seconds % 60)  # Compute remaining seconds

    if hours > 0:  # Include hours when present
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:  # Include minutes when present
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"  # Fallback: only seconds


def export_dataset(dataset, logger):
    """
    Exports the dataset to CSV and reports where it was written.

    :param dataset: Dataset with the records of the run
    :param logger: Logger instance for output
    :return: Path to the CSV file, or None if the dataset is empty
    """

    csv_path = dataset.export_csv()  # Export the dataset for spreadsheets
    if csv_path:  # Only non-empty datasets are exported
        verbose_output(logger, f"{BackgroundColors.GREEN}Dataset exported to {BackgroundColors.CYAN}{csv_path}{Style.RESET_ALL}")

    return csv_path  # Return the CSV path


def main():
    """
    Main function.

    :param: None
    :return: Process exit code
    """

    logger = Logger(LOG_FILE, clean=True)  # Create a Logger instance
    try:  # The log file is closed however the run ends
        logger.write(
            f"{BackgroundColors.CLEAR_TERMINAL}{BackgroundColors.BOLD}{BackgroundColors.GREEN}Welcome to the {BackgroundColors.CYAN}Amazon Product Scraper{BackgroundColors.GREEN} program!{Style.RESET_ALL}"
        )  # Output the welcome message
        start_time = datetime.datetime.now()  # Get the start time of the program

        if verify_filepath_exists(ENV_PATH):  # The .env file is optional
            load_dotenv(ENV_PATH)  # Load environment variables

        input_file = os.getenv("INPUT_FILE", INPUT_FILE)  # Allow overriding the input path
        try:  # Configuration errors abort the run before any page is loaded
            config = load_configuration(load_input_file(input_file))
        except ConfigurationError as e:
            logger.write(f"{BackgroundColors.RED}Configuration error: {e}{Style.RESET_ALL}")
            return 1

        logger.write(
            f"{BackgroundColors.GREEN}Starting in {BackgroundColors.CYAN}{config['mode']}{BackgroundColors.GREEN} mode on {BackgroundColors.CYAN}amazon.{config['marketplace']}{Style.RESET_ALL}"
        )  # Output the run parameters

        tasks = build_scrape_tasks(config)  # Build the task list
        run_directory = os.path.join(OUTPUT_DIRECTORY, config["run_name"])  # Directory of this run
        dataset = Dataset(os.path.join(run_directory, DATASET_FILENAME), clean=True)  # Records sink, emptied for this run
        failed_dataset = Dataset(os.path.join(run_directory, FAILED_REQUESTS_FILENAME), clean=True)  # Failed requests sink, emptied for this run
        extractor = Amazon(marketplace=config["marketplace"])  # Shared stateless extractor

        headless = os.getenv("HEADLESS", "True").lower() == "true"  # Read after .env is loaded
        executable_path = os.getenv("CHROME_EXECUTABLE_PATH", "")  # Read after .env is loaded

        try:  # Records already written are exported even if the run is interrupted
            summary = run_scrape_tasks(
                tasks,
                lambda: Browser(logger=logger, headless=headless, executable_path=executable_path),
                extractor,
                dataset,
                failed_dataset,
                logger,
                concurrency=config["concurrency"],
                max_request_retries=config["max_request_retries"],
            )  # Process every task
        finally:
            export_dataset(dataset, logger)

        logger.write(
            f"{BackgroundColors.GREEN}Processed {BackgroundColors.CYAN}{len(tasks)}{BackgroundColors.GREEN} pages: "
            f"{BackgroundColors.CYAN}{summary['ok']}{BackgroundColors.GREEN} ok, "
            f"{BackgroundColors.CYAN}{summary['error']}{BackgroundColors.GREEN} with errors, "
            f"{BackgroundColors.CYAN}{summary['failed']}{BackgroundColors.GREEN} failed. "
            f"{BackgroundColors.CYAN}{dataset.count}{BackgroundColors.GREEN} records written to {BackgroundColors.CYAN}{dataset.path}{Style.RESET_ALL}"
        )  # Output the run summary

        finish_time = datetime.datetime.now()  # Get the finish time of the program
        logger.write(
            f"{BackgroundColors.GREEN}Execution time: {BackgroundColors.CYAN}{calculate_execution_time(start_time, finish_time)}{Style.RESET_ALL}"
        )  # Output the execution time
        logger.write(
            f"{BackgroundColors.BOLD}{BackgroundColors.GREEN}Program finished.{Style.RESET_ALL}"
        )  # Output the end of the program message
    finally:
        logger.close()

    return 0  # Success


if __name__ == "__main__":
    """
    This is the standard boilerplate that calls the main() function.

    :return: None
    """

    sys.exit(main())  # Call the main function
