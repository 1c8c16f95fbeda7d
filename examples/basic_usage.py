"""Basic usage example for CiteView."""
from citeview import CiteView, ResultPage
from citeview.converters import HtmlConverter

def main():
    # Initialize CiteView (reads GEMINI_API_KEY from the environment or .env)
    print("Initializing CiteView...")
    app = CiteView()

    # Example 1: Create a store and index a document
    print("\n=== Example 1: Create Store and Upload ===")
    store = app.create_store("Example Handbooks")
    print(f"Created store: {store.name}")

    summary = app.upload_file("./handbook.pdf", store.name)
    print(f"Indexed document: {summary['documentName']}")

    # Example 2: Ask a question
    print("\n=== Example 2: Grounded Search ===")
    query = "How many vacation days do new employees get?"
    result, rendered = app.search_and_render(query, [store.name])

    print(result.text)
    print(f"\nSources ({len(rendered.sidebar_entries)}):")
    for entry in rendered.sidebar_entries:
        print(f"  [{entry.label}] {entry.title}")

    # Example 3: Interactive highlighting on the rendered page
    print("\n=== Example 3: Citation Highlighting ===")
    page = ResultPage(renderer=app.renderer)
    request_id = page.begin_search()
    page.display_result(result, request_id)

    marker = page.tree.select_one("sup.citation-marker")
    if marker is not None:
        state = page.interaction.click(marker)
        highlighted = page.tree.select(".highlighted")
        print(f"Clicked marker {marker.get_text()}: {state}, {len(highlighted)} elements highlighted")

    # Example 4: Export to HTML
    print("\n=== Example 4: HTML Export ===")
    output = HtmlConverter().convert(rendered, "./answer.html", query=query)
    print(f"Saved: {output}")

if __name__ == "__main__":
    main()
