"""
Flow Builder - Main Interface

Interactive terminal front end for the Flow Builder. It plays the part of the
graph-editing surface: the user adds, connects, and deletes states, imports
existing ASL definitions, previews the exported ASL, and deploys it to AWS
Step Functions to run executions.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from colorama import Fore, Style
from prompt_toolkit import prompt, styles

from .config import FlowBuilderConfig
from .deploy import StepFunctionsDeployer
from .errors import FlowBuilderError
from .session import FlowSession
from .visualizer import DefinitionLoader, DefinitionVisualizer

MENU_OPTIONS = [
    ("1", "Add Pass state"),
    ("2", "Connect states"),
    ("3", "Delete states"),
    ("4", "Import ASL definition"),
    ("5", "Export / preview ASL"),
    ("6", "Deploy to AWS Step Functions"),
    ("7", "Start execution"),
    ("8", "Execution history"),
    ("9", "Exit"),
]


class FlowBuilderInterface:
    """
    Main interface for the Flow Builder.

    Holds one editing session and the deployed state machine, if any, and
    dispatches menu choices to the session, loader, visualizer, and deployer.
    """

    def __init__(self, config: Optional[FlowBuilderConfig] = None, sessions_root: Path = Path("sessions")):
        """Initialize the Flow Builder interface."""
        self.config = config or FlowBuilderConfig.from_env()
        self.session_id = self._generate_session_id()
        self.session_dir = sessions_root / self.session_id
        self.session = FlowSession()
        self.loader = DefinitionLoader()
        self.visualizer = DefinitionVisualizer()
        self.deployer = StepFunctionsDeployer(self.config)
        self.state_machine_arn: Optional[str] = None

        self.prompt_style = styles.Style.from_dict({
            "prompt": "ansicyan bold",
        })

    def _generate_session_id(self) -> str:
        """Generate a unique session ID."""
        return f"flow_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"

    def _print_banner(self):
        """Print the welcome banner."""
        print(f"""
{Fore.CYAN}╔══════════════════════════════════════════════════════════════════════════════╗
║                                                                              ║
║        Flow Builder                                                          ║
║                                                                              ║
║    Assemble workflow graphs and convert them to Amazon States Language.      ║
║                                                                              ║
╚══════════════════════════════════════════════════════════════════════════════╝{Style.RESET_ALL}

{Fore.YELLOW}Session ID: {self.session_id}{Style.RESET_ALL}
""")

    def _print_menu(self):
        print(f"\n{Fore.MAGENTA}{'=' * 80}{Style.RESET_ALL}")
        print(f"{Fore.WHITE}Nodes: {len(self.session.nodes)}  Edges: {len(self.session.edges)}  "
              f"Status: {self.session.status.value}{Style.RESET_ALL}")
        if self.state_machine_arn:
            print(f"{Fore.WHITE}Deployed: {self.state_machine_arn}{Style.RESET_ALL}")
        for key, title in MENU_OPTIONS:
            print(f"{key}. {title}")

    def _get_user_input(self, prompt_text: str, input_type: str = "text") -> str:
        """
        Get user input with editing support.

        Args:
            prompt_text: The prompt to display to the user
            input_type: "text" for one line, "file" to accept pasted JSON or a 'file:' path

        Returns:
            User input as string
        """
        print(f"{Fore.YELLOW}{prompt_text}{Style.RESET_ALL}")

        if input_type == "file":
            print("Options:")
            print("1. Paste JSON line by line, Enter on an empty line to finish")
            print("2. Provide a file path (starting with 'file:')")
            user_input = self._editor(multiline=True).strip()
            if user_input.startswith("file:"):
                file_path = user_input.split("file:", 1)[1].strip()
                try:
                    with open(Path.cwd() / file_path, "r", encoding="utf-8") as f:
                        return f.read().strip()
                except OSError as e:
                    print(f"{Fore.RED}Error reading file: {e}{Style.RESET_ALL}")
                    return ""
            return user_input

        return self._editor(multiline=False)

    def _editor(self, multiline: bool = False) -> str:
        """
        Read a line, or several lines finished by an empty line.

        Returns:
            User input as string, "quit" when input is cancelled
        """
        lines: list[str] = []
        while True:
            try:
                line = prompt([("class:prompt", "> ")], style=self.prompt_style).rstrip()
                if not multiline:
                    return line.strip()
                elif line == "" and lines:
                    return "\n".join(lines).strip()
                lines.append(line)
            except (EOFError, KeyboardInterrupt):
                print(f"\n{Fore.YELLOW}Input cancelled.{Style.RESET_ALL}")
                return "quit"

    def add_pass_state(self):
        node = self.session.add_pass_state()
        print(f"{Fore.GREEN}✅ Added {node.data.label} ({node.id}){Style.RESET_ALL}")

    def connect_states(self):
        self._print_nodes()
        source = self._get_user_input("Source node id:")
        target = self._get_user_input("Target node id:")
        label = self._get_user_input("Branch label (empty for a plain transition, 'Default' for the fallback):")
        edge = self.session.connect(source, target, label or None)
        print(f"{Fore.GREEN}✅ Connected {edge.source} → {edge.target}{Style.RESET_ALL}")

    def delete_states(self):
        self._print_nodes()
        raw = self._get_user_input("Node ids to delete (comma separated):")
        node_ids = [n.strip() for n in raw.split(",") if n.strip()]
        if not node_ids:
            return
        deleted = self.session.delete_nodes(node_ids)
        print(f"{Fore.GREEN}✅ Deleted {len(deleted)} node(s){Style.RESET_ALL}")

    def import_definition(self):
        text = self._get_user_input("Provide the ASL definition JSON:", "file")
        if not text or text == "quit":
            return
        result = self.loader.load_definition_from_json_string(text)
        if result["definition"] is None:
            return
        if not result["success"]:
            choice = self._get_user_input("Definition has validation errors. Import anyway? (y/n):")
            if choice.lower() != "y":
                return
        graph = self.session.import_definition(result["definition"])
        print(f"{Fore.GREEN}✅ Imported {len(graph['nodes'])} states and {len(graph['edges'])} transitions{Style.RESET_ALL}")

    def export_definition(self):
        definition = self.session.export_definition()
        print(self.visualizer.visualize_definition(definition))
        print(self.visualizer.export_json(definition))
        choice = self._get_user_input("Save the definition to the session directory? (y/n):")
        if choice.lower() == "y":
            self.session_dir.mkdir(parents=True, exist_ok=True)
            asl_output_path = self.session_dir / "state_machine.asl.json"
            with open(asl_output_path, "w", encoding="utf-8") as f:
                json.dump(definition, f, indent=2)
            self.visualizer.save_definition_visualization(definition, self.session_dir / "state_machine_visualization.md")
            print(f"{Fore.GREEN}✅ State Machine saved to {asl_output_path}{Style.RESET_ALL}")

    def deploy_definition(self):
        definition = self.session.export_definition()
        default_name = f"flow-builder-{int(datetime.now(timezone.utc).timestamp())}"
        name = self._get_user_input(f"Enter a name for your state machine (empty for {default_name}):")
        if name == "quit":
            return
        name = name or default_name
        role_arn = None
        if not self.config.role_arn:
            role_arn = self._get_user_input("Enter the IAM role ARN for the state machine:")
            if role_arn == "quit":
                return
        result = self.deployer.create_state_machine(name, definition, role_arn)
        self.state_machine_arn = result["stateMachineArn"]

    def start_execution(self):
        if not self.state_machine_arn:
            print(f"{Fore.YELLOW}Deploy a state machine first.{Style.RESET_ALL}")
            return
        raw_input = self._get_user_input("Execution input JSON (empty for {}):", "file")
        if raw_input == "quit":
            return
        execution_input = json.loads(raw_input) if raw_input else None
        started = self.deployer.start_execution(self.state_machine_arn, execution_input)
        execution = self.deployer.wait_for_execution(started["executionArn"])
        if execution.get("output") is not None:
            print(json.dumps(execution["output"], indent=2, default=str))

    def show_execution_history(self):
        if not self.state_machine_arn:
            print(f"{Fore.YELLOW}Deploy a state machine first.{Style.RESET_ALL}")
            return
        history = self.deployer.list_executions(self.state_machine_arn)
        if not history["executions"]:
            print(f"{Fore.YELLOW}No executions yet.{Style.RESET_ALL}")
        for execution in history["executions"]:
            print(f"  • {execution.get('name')}: {execution.get('status')} ({execution.get('startDate')})")

    def _print_nodes(self):
        for node in self.session.nodes:
            print(f"  {node.id}: {node.data.label} [{node.data.state_type}]")

    def handle_choice(self, choice: str) -> bool:
        """
        Run one menu action.

        Returns:
            False when the user chose to exit, True otherwise
        """
        actions = {
            "1": self.add_pass_state,
            "2": self.connect_states,
            "3": self.delete_states,
            "4": self.import_definition,
            "5": self.export_definition,
            "6": self.deploy_definition,
            "7": self.start_execution,
            "8": self.show_execution_history,
        }
        if choice in ("9", "quit"):
            return False
        action = actions.get(choice)
        if action is None:
            print(f"{Fore.RED}Invalid choice: {choice}{Style.RESET_ALL}")
            return True
        try:
            action()
        except FlowBuilderError as e:
            print(f"{Fore.RED}❌ {e}{Style.RESET_ALL}")
        except json.JSONDecodeError as e:
            print(f"{Fore.RED}❌ Invalid JSON: {e}{Style.RESET_ALL}")
        return True

    def _save_session_data(self):
        """Save the current graph and its definition to the session directory."""
        if not self.session.nodes:
            return
        try:
            self.session_dir.mkdir(parents=True, exist_ok=True)
            with open(self.session_dir / "graph.json", "w", encoding="utf-8") as f:
                json.dump(self.session.to_graph_dict(), f, indent=2, ensure_ascii=False)
            with open(self.session_dir / "state_machine.asl.json", "w", encoding="utf-8") as f:
                json.dump(self.session.export_definition(), f, indent=2, ensure_ascii=False)
            print(f"{Fore.GREEN}✅ Session data saved to {self.session_dir}{Style.RESET_ALL}")
        except (OSError, FlowBuilderError) as e:
            print(f"{Fore.RED}❌ Error saving session data: {e}{Style.RESET_ALL}")

    def run(self):
        """Main loop of the Flow Builder interface."""
        self._print_banner()
        try:
            while True:
                self._print_menu()
                if not self.handle_choice(self._get_user_input("Your choice:")):
                    break
        except KeyboardInterrupt:
            print(f"\n{Fore.YELLOW}🛑 Process interrupted by user{Style.RESET_ALL}")
        finally:
            self._save_session_data()
            print(f"\n{Fore.CYAN}👋 Thank you for using Flow Builder!{Style.RESET_ALL}")
