from flow_builder_asl.data_schema import get_sample_definition, list_sample_definitions
from flow_builder_asl.metrics import compare_definitions
from flow_builder_asl.session import ExportStrategy, FlowSession
from flow_builder_asl.visualizer import DefinitionVisualizer

def main():
    """Round-trip each bundled sample definition through the graph and compare structures."""
    visualizer = DefinitionVisualizer()
    for name in list_sample_definitions():
        original = get_sample_definition(name)
        session = FlowSession()
        session.import_definition(original)
        derived = session.export_definition(ExportStrategy.DERIVED)

        print(visualizer.visualize_definition(derived))
        summary, _ = compare_definitions(derived, original)
        print(summary)



if __name__ == "__main__":
    main()
