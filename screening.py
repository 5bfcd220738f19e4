import requests
import json
import sys
from typing import Any, Dict, List, Optional
import socket
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

class ScreeningClient:
    def __init__(self, base_url: str = "http://localhost:8000"):
        self.base_url = base_url
        self.session = requests.Session()

    def analyze_screening(self, screening_id: str) -> Dict[str, Any]:
        """Analyze the conversation recorded for a screening."""
        try:
            response = self.session.get(f"{self.base_url}/api/v1/screenings/{screening_id}/analysis")
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error analyzing screening: {str(e)}")
            return {}

    def analyze_messages(self, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Analyze a list of messages without going through a screening."""
        try:
            response = self.session.post(
                f"{self.base_url}/api/v1/conversations/analyze",
                json={"messages": messages}
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error analyzing messages: {str(e)}")
            return {}

    def analyze_file(self, path: str) -> Dict[str, Any]:
        """Analyze messages stored in a JSON file (a list, or a QoreAI response envelope)."""
        try:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading {path}: {str(e)}")
            return {}
        if isinstance(payload, dict):
            payload = (payload.get("data") or {}).get("results", [])
        return self.analyze_messages(payload)

    def print_analysis(self, analysis: Dict[str, Any]):
        if not analysis:
            print("No analysis available.")
            return
        minutes, seconds = divmod(analysis.get("duration", 0), 60)
        print("\nConversation Analysis:")
        print(f"  Messages:  {analysis['totalMessages']} "
              f"(agent {analysis['agentMessages']}, candidate {analysis['customerMessages']})")
        print(f"  Duration:  {minutes}m {seconds}s")
        print(f"  Sentiment: {analysis['sentiment']}")
        print(f"  Topics:    {', '.join(analysis['keyTopics']) or '-'}")

    def start(self):
        """Start an interactive session."""
        print("\nScreening Insights")
        print("Type 'help' to see available commands.\n")

        while True:
            try:
                user_input = input("\n> ").strip()
                command, _, argument = user_input.partition(" ")
                command = command.lower()
                argument = argument.strip()

                if command in ['exit', 'quit']:
                    break

                elif command == 'analyze' and argument:
                    self.print_analysis(self.analyze_screening(argument))

                elif command == 'file' and argument:
                    self.print_analysis(self.analyze_file(argument))

                elif command == 'help':
                    print("\nAvailable commands:")
                    print("  analyze <id> - Analyze the conversation of a screening")
                    print("  file <path>  - Analyze messages from a JSON file")
                    print("  exit/quit    - Leave")
                    print("  help         - Show this help message")

                elif user_input:
                    print("Unknown command. Type 'help' to see available commands.")

            except (KeyboardInterrupt, EOFError):
                print()
                break

def check_server_connection(host: str = "localhost", port: int = 8000) -> bool:
    """Check if the server is running and accessible."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(2)
        result = sock.connect_ex((host, port))
        sock.close()
        if result != 0:
            logger.error(f"Port {port} is not in use")
            return False
        try:
            response = requests.get(f"http://{host}:{port}/api/v1/health", timeout=2)
            return response.status_code == 200
        except requests.exceptions.RequestException:
            logger.error(f"Port {port} is in use but not responding correctly")
            return False
    except socket.error as e:
        logger.error(f"Socket error: {str(e)}")
        return False

def main(argv: Optional[List[str]] = None):
    argv = sys.argv[1:] if argv is None else argv
    if not check_server_connection():
        print("\nStart the API server first:")
        print("   uvicorn app.main:app --reload")
        sys.exit(1)

    client = ScreeningClient()
    if argv:
        for screening_id in argv:
            client.print_analysis(client.analyze_screening(screening_id))
        return
    client.start()

if __name__ == "__main__":
    main()
